import logging

import pytest
from reflective_bind.log import logger as package_logger


@pytest.fixture(autouse=True)
def _reset_package_logger():  # pyright: ignore[reportUnusedFunction]
	"""The CLI installs its own handler; undo that between tests."""
	yield
	for handler in list(package_logger.handlers):
		package_logger.removeHandler(handler)
	package_logger.propagate = True
	package_logger.setLevel(logging.NOTSET)
