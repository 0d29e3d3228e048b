from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatstore.services.manager import ServicesManager

# -------------------------------------------------------------- #
# Context Class
# -------------------------------------------------------------- #


class Context:
    """
    Central context object owned by the host process.

    Gives every service access to the services manager without module-level
    globals, so each host (or test) builds its own isolated set of services.
    """

    def __init__(self):
        self.services_manager: ServicesManager | None = None
        self._shutting_down: bool = False

    def set_services_manager(self, services_manager: "ServicesManager") -> None:
        """Set the services manager instance."""
        self.services_manager = services_manager

    def is_shutting_down(self) -> bool:
        """Check if the application is shutting down."""
        return self._shutting_down

    def mark_shutdown_started(self) -> None:
        """Mark that shutdown has been initiated."""
        self._shutting_down = True
