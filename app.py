import sys

from loguru import logger

from inkwell.api import create_app
from inkwell.config import settings
from inkwell.workspace import Workspace

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Opening document workspace at {settings.data_dir}")
workspace = Workspace.from_settings(settings)
app = create_app(workspace=workspace)
