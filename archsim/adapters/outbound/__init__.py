from .file_store import ArchitectureFileStore
from .console_reporter import ConsoleReporter, Colors

__all__ = ["ArchitectureFileStore", "ConsoleReporter", "Colors"]
