"""
Standardized exception hierarchy for the LifeXP gamification engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class LifeXPError(Exception):
    """
    Base exception for all engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise LifeXPError(
            message="Failed to apply XP gain",
            user_id="user-1",
            operation="apply_xp_gain",
            context={"avatar_id": "avatar-1"}
        )
    """

    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause,
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Caller Misuse
# ==========================================

class ValidationError(LifeXPError):
    """
    Raised when an input falls outside its documented range

    Examples:
    - Difficulty outside 1-10
    - Goal progress outside 0.0-1.0
    - Negative XP amount

    Example:
        raise ValidationError(
            message="Difficulty must be between 1 and 10",
            field="difficulty",
            value=11
        )
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


class InvalidStateTransition(LifeXPError):
    """
    Raised when a mutation is not allowed from the entity's current state

    Examples:
    - Updating progress on a completed or cancelled goal
    - Unlocking an achievement that is already unlocked
    - Goal status change missing from the transition table
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        from_state: Optional[str] = None,
        to_state: Optional[str] = None,
        **kwargs
    ):
        self.entity = entity
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            message=message,
            user_message=f"This {entity or 'item'} can no longer be changed that way.",
            context={"entity": entity, "from_state": from_state, "to_state": to_state},
            **kwargs
        )


# ==========================================
# Store Collaborator Errors
# ==========================================

class StoreError(LifeXPError):
    """
    Base class for errors raised by store collaborators
    """
    pass


class NotFoundError(StoreError):
    """Requested record does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


class ConcurrencyConflict(StoreError):
    """A write was rejected because the stored record changed since it was read"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message="Your data changed while we were saving it. Please try again.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(LifeXPError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )
