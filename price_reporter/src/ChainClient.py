"""ChainClient: Abstract base class for chain access."""

from abc import ABC, abstractmethod

from .ReportPayload import SubmissionStatus


class ChainClient(ABC):
    """Abstract base class for chain client implementations.

    Provides the current block height and submission of signed envelopes.
    Implementations are blocking and do not retry; the Reporter runs them in a
    worker thread and decides what is safe to repeat.
    """

    @abstractmethod
    def get_height(self) -> int:
        """Fetch the current block height.

        :returns: Latest known block height.
        :raises NetworkError: If the chain cannot be reached.
        """
        pass

    @abstractmethod
    def submit(self, envelope: bytes) -> SubmissionStatus:
        """Submit a signed envelope.

        :param envelope: Serialized signed report.
        :returns: Pending submission status.
        :raises NetworkError: If the submission fails.
        """
        pass
