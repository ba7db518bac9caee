"""Interface for interacting with the user (output only).

Defines the contract for displaying results, errors, warnings and
informational messages, allowing different UI implementations.
"""

import abc
from typing import Any, Dict, List

from intentcli.domain.models.common import ProcessedOutput, WeatherReport


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: ProcessedOutput, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The processed output string to display.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_weather(self, report: WeatherReport, units: str = "metric") -> None:
        """Renders a normalized weather report."""
        pass

    @abc.abstractmethod
    def display_table(self, title: str, columns: List[str], rows: List[Dict[str, Any]]) -> None:
        """Renders rows of key/value records as a table."""
        pass
