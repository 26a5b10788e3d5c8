"""
Custom exceptions for the Sharpmarks gradebook.
"""


class GradebookError(Exception):
    """Base class for errors the API maps to a client response."""
    
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(GradebookError):
    """Raised when no valid caller identity can be established."""
    
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AccessDeniedError(GradebookError):
    """Raised when the policy denies an action to the caller."""
    
    def __init__(self, user_id: int = None, action: str = None, resource: str = None):
        self.user_id = user_id
        self.action = action
        self.resource = resource
        message = "Access denied"
        if action and resource:
            message = f"Access denied: cannot {action} {resource}"
        super().__init__(message)


class NotFoundError(GradebookError):
    """Raised when a referenced resource does not exist."""
    
    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id {resource_id} not found")


class ValidationError(GradebookError):
    """Raised when input validation fails."""
    
    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class ConflictError(GradebookError):
    """Raised on a unique-constraint collision outside the upsert path."""
    
    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)
