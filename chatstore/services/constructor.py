import os
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from chatstore.context import Context

from chatstore.services.conversation_store.manager import ConversationStoreService
from chatstore.services.file_manager.manager import FileManagerService
from chatstore.services.logger import AsyncLoggingService
from chatstore.services.manager import ServicesManager
from chatstore.utils import resolve_app_data_dir, resolve_log_dir

# prefer a project-local .env.local file
load_dotenv(dotenv_path=".env.local")

# -------------------------------------------------------------- #
# Constructor for Dynamic Creation of Services Manager
# -------------------------------------------------------------- #


def construct_services_manager(
    context: "Context",
    app_data_dir: str | None = None,
    default_logging_path: str | None = None,
    log_file: str | None = None,
    use_timestamp_logs: bool = True,
    console_output: bool = True,
) -> ServicesManager:
    """Construct the services manager and register it on the context.

    Nothing touches the disk here; storage is created by
    ``ServicesManager.initialize_all()``.

    Args:
        context: Context instance owning the services
        app_data_dir: Application data directory (default: CHAT_APP_DATA_DIR,
                      then the platform default from resolve_app_data_dir)
        default_logging_path: Directory to store log files (default: CHAT_LOG_DIR, then "logs")
        log_file: Specific log file name (optional, overrides use_timestamp_logs)
        use_timestamp_logs: If True and log_file is None, creates timestamped log files (default: True)
        console_output: Echo log lines to stdout (default: True)
    """
    if app_data_dir is None:
        app_data_dir = os.getenv("CHAT_APP_DATA_DIR") or str(resolve_app_data_dir())
    default_logging_path = resolve_log_dir(default_logging_path)

    # create logger
    logging_service = AsyncLoggingService(
        context=context,
        log_dir=default_logging_path,
        log_file=log_file,
        use_timestamp=use_timestamp_logs,
        console_output=console_output,
    )

    # -------------------------------------------------------------- #
    # Service Managers Setup
    # -------------------------------------------------------------- #

    file_service_manager = FileManagerService(context=context, storage_path=app_data_dir)
    conversation_store_service_manager = ConversationStoreService(
        context=context, app_data_dir=app_data_dir
    )

    services_manager = ServicesManager(
        context=context,
        logging_service=logging_service,
        file_service_manager=file_service_manager,
        conversation_store_service_manager=conversation_store_service_manager,
    )
    context.set_services_manager(services_manager)
    return services_manager
