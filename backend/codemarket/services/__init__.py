"""
Services Module

Provides interfaces for collaborators outside the request/response path:
- Payments: payment provider gateway (stubbed)
- Verification: background verification of newly listed projects
- Uploads: storage of project archives and preview media
"""

# Payments
from .payment_base import (
    PaymentGateway,
    PaymentIntent,
    minor_units,
)
from .payment_stub import StubPaymentGateway

# Verification
from .verification import (
    VerificationService,
    FlagVerificationService,
    VerificationQueue,
)

# Uploads
from .uploads import (
    StoredFile,
    UploadTooLarge,
    save_upload,
)

__all__ = [
    # Payments
    "PaymentGateway",
    "PaymentIntent",
    "minor_units",
    "StubPaymentGateway",
    # Verification
    "VerificationService",
    "FlagVerificationService",
    "VerificationQueue",
    # Uploads
    "StoredFile",
    "UploadTooLarge",
    "save_upload",
]
