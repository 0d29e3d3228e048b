from chatstore.services.file_manager.manager import FileManagerService

__all__ = [
    "FileManagerService",
]
