"""
Colored logging utilities for authorization request resolution.

This module provides colored console logging with component identification,
timestamps, and message formatting so each step of building an authorization
redirect (registration lookup, PKCE generation, redirect) is easy to follow.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()


class ComponentType(str, Enum):
    """Parties involved in an authorization redirect."""
    CLIENT = "CLIENT"
    USER_AGENT = "USER-AGENT"


class MessageType(str, Enum):
    """Message types for logging."""
    ERROR = "ERROR"
    PKCE_GENERATION = "PKCE-GENERATION"
    PKCE_FALLBACK = "PKCE-FALLBACK"
    REDIRECT = "REDIRECT"


class OAuthLogger:
    """
    Colored logger for authorization request flows.

    Formats each message as a colored block (timestamp, source and
    destination, message type, sanitized data) and emits it through the
    standard ``logging`` module under ``oauth.<component>``.
    """

    def __init__(self, component_name: str, level: int = logging.INFO):
        """
        Initialize logger for a specific component.

        Args:
            component_name: Name of the component (CLIENT, USER-AGENT)
            level: Minimum level emitted by the console handler
        """
        self.component_name = component_name.upper()
        self.colors = self._get_component_colors()

        self.logger = logging.getLogger(f"oauth.{component_name.lower()}")
        self.logger.setLevel(level)

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        handler = logging.StreamHandler()
        handler.setLevel(level)
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _get_component_colors(self) -> Dict[str, str]:
        """Get color scheme for different components and message types."""
        return {
            'CLIENT': Fore.BLUE + Style.BRIGHT,
            'USER-AGENT': Fore.CYAN + Style.BRIGHT,
            'ERROR': Fore.RED + Style.BRIGHT,
            'SUCCESS': Fore.GREEN + Style.BRIGHT,
            'INFO': Fore.CYAN,
            'HEADER': Fore.WHITE + Style.BRIGHT,
            'SEPARATOR': Fore.WHITE + Style.DIM,
            'RESET': Style.RESET_ALL
        }

    def _format_timestamp(self) -> str:
        """Format current timestamp for log messages."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sanitize sensitive data for logging.

        Redacts secrets and truncates tokens, codes, verifiers and state.
        """
        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()

            if any(sensitive in key_lower for sensitive in ['password', 'secret', 'key']):
                sanitized[key] = '[REDACTED]'
            elif any(token in key_lower for token in ['token', 'code', 'challenge', 'verifier', 'state']):
                # Show first 10 characters for correlation
                if isinstance(value, str) and len(value) > 10:
                    sanitized[key] = f"{value[:10]}..."
                else:
                    sanitized[key] = value
            else:
                sanitized[key] = value

        return sanitized

    def format_oauth_message(self,
                             source: str,
                             destination: str,
                             message_type: str,
                             data: Dict[str, Any],
                             success: bool = True) -> str:
        """Render a message block without emitting it."""
        timestamp = self._format_timestamp()
        source_color = self.colors.get(source.upper(), self.colors['INFO'])
        dest_color = self.colors.get(destination.upper(), self.colors['INFO'])

        if not success:
            msg_color = self.colors['ERROR']
        elif message_type == MessageType.REDIRECT.value:
            msg_color = self.colors['SUCCESS']
        else:
            msg_color = self.colors['INFO']

        reset = self.colors['RESET']
        lines = [
            f"{self.colors['HEADER']}[{timestamp}] {source_color}{source}{reset} → {dest_color}{destination}{reset}",
            f"{msg_color}{message_type}:{reset}",
        ]
        for key, value in self._sanitize_data(data).items():
            lines.append(f"  {self.colors['INFO']}{key}:{reset} {value}")
        lines.append(f"{self.colors['SEPARATOR']}{'-' * 60}{reset}")
        return "\n".join(lines)

    def log_oauth_message(self,
                          source: str,
                          destination: str,
                          message_type: str,
                          data: Dict[str, Any],
                          success: bool = True):
        """
        Log an OAuth message with color coding and formatting.

        Args:
            source: Source component name
            destination: Destination component name
            message_type: Type of message (REDIRECT, ERROR, PKCE-GENERATION)
            data: Message data dictionary
            success: Whether the operation was successful
        """
        message = self.format_oauth_message(source, destination, message_type, data, success)
        if success:
            self.logger.info(message)
        else:
            self.logger.error(message)

    def log_pkce_operation(self,
                           operation: MessageType,
                           details: Dict[str, Any],
                           success: bool = True):
        """
        Log PKCE-specific operations.

        Args:
            operation: MessageType.PKCE_GENERATION or MessageType.PKCE_FALLBACK
            details: Operation details
            success: Whether operation was successful
        """
        self.log_oauth_message(
            source=self.component_name,
            destination=self.component_name,
            message_type=MessageType(operation).value,
            data=details,
            success=success
        )

    def log_error(self,
                  error_type: str,
                  message: str,
                  details: Optional[Dict[str, Any]] = None):
        """
        Log error messages with context.

        Args:
            error_type: Type of error
            message: Error message
            details: Additional error context
        """
        error_data = {
            "error_type": error_type,
            "message": message
        }

        if details:
            error_data.update(details)

        self.log_oauth_message(
            source=self.component_name,
            destination="ERROR-HANDLER",
            message_type=MessageType.ERROR.value,
            data=error_data,
            success=False
        )

    def log_startup(self, port: int, additional_info: Optional[Dict[str, Any]] = None):
        """
        Log component startup information.

        Args:
            port: Port number the component is running on
            additional_info: Additional startup information
        """
        lines = [f"{self.colors['SUCCESS']}🚀 {self.component_name} started on port {port}{self.colors['RESET']}"]
        if additional_info:
            for key, value in additional_info.items():
                lines.append(f"   {key}: {value}")
        lines.append(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        self.logger.info("\n".join(lines))
