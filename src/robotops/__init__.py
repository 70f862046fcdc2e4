import logging as module_logging

import robotops.logging as application_logging

application_logging.configure()
logger = module_logging.getLogger(__name__)

__project__ = "robotops"
__version__ = "2026.1.0"

logger.info(f"RobotOps {__version__}")
