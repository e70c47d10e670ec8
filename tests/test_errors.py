"""Tests for the press and client exception hierarchies."""

from manuscript_press.clients import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from manuscript_press.errors import (
    CollaboratorError,
    CoverEmbeddingError,
    OutOfInventoryError,
    PackagingError,
    PressError,
    PublishCancelledError,
    PublishError,
    StructuralError,
    TransientCollaboratorError,
    ValidationFailedError,
)


class TestPressErrors:
    """Tests for the pipeline exceptions."""

    def test_message_stored(self):
        """PressError keeps its message."""
        error = PressError("Something went wrong")

        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_packaging_hierarchy(self):
        """Structural and cover errors are packaging errors."""
        assert isinstance(StructuralError("x"), PackagingError)
        assert isinstance(CoverEmbeddingError("x"), PackagingError)
        assert isinstance(PackagingError("x"), PressError)

    def test_default_messages(self):
        """Inventory and cancellation errors have default messages."""
        assert OutOfInventoryError().message == "No available identifiers"
        assert isinstance(OutOfInventoryError(), CollaboratorError)
        assert PublishCancelledError().message == "Publish call cancelled"

    def test_validation_failed_verdicts(self):
        """ValidationFailedError carries its verdicts."""
        error = ValidationFailedError("failed", verdicts=["v"])

        assert error.verdicts == ["v"]
        assert ValidationFailedError("failed").verdicts == []

    def test_publish_error_attributes(self):
        """PublishError names the phase and carries the project."""
        project = object()
        error = PublishError("Phase cover failed", phase="cover", project=project)

        assert error.phase == "cover"
        assert error.project is project


class TestClientErrors:
    """Tests for the network client exceptions."""

    def test_client_error_is_collaborator_error(self):
        """Client failures fail a phase like any collaborator."""
        error = ClientError("test")

        assert isinstance(error, CollaboratorError)
        assert error.transient is False

    def test_connection_error_transient(self):
        """ConnectionError is a retryable collaborator error."""
        error = ConnectionError("Network unreachable")

        assert isinstance(error, TransientCollaboratorError)
        assert isinstance(error, ClientError)
        assert error.transient is True

    def test_api_error_transient_by_status(self):
        """5xx responses are transient, 4xx responses are not."""
        assert APIError("Server error", status_code=503).transient is True
        assert APIError("Bad request", status_code=400).transient is False
        assert APIError("Server error", status_code=500).status_code == 500

    def test_rate_limit_error(self):
        """RateLimitError has status 429 and is transient."""
        error = RateLimitError()

        assert error.status_code == 429
        assert error.message == "Rate limit exceeded"
        assert error.transient is True

    def test_not_found_error(self):
        """NotFoundError has status 404 and is not transient."""
        error = NotFoundError("Cover not found")

        assert error.status_code == 404
        assert error.message == "Cover not found"
        assert error.transient is False

    def test_validation_error_errors(self):
        """ValidationError stores the list of problems."""
        error = ValidationError("Invalid response", errors=["no image"])

        assert error.errors == ["no image"]
        assert ValidationError("Invalid response").errors == []
