import abc
from typing import Generic, Optional, TypeVar

# Generic type to represent any type of credentials object
CredentialsT = TypeVar("CredentialsT")


class BaseAuthClient(Generic[CredentialsT], abc.ABC):
    """
    Abstract base class for credential stores.
    The server asks it for a user's API token when no request-scoped token is available.
    """

    @abc.abstractmethod
    def get_user_credentials(
        self, service_name: str, user_id: str
    ) -> Optional[CredentialsT]:
        """
        Retrieves user credentials for a specific service

        Args:
            service_name: Name of the service (e.g., "fetchserp")
            user_id: Identifier for the user

        Returns:
            Credentials object if found, None otherwise
        """
        pass

    def save_user_credentials(
        self, service_name: str, user_id: str, credentials: CredentialsT
    ) -> None:
        """
        Saves user credentials entered through the auth flow

        Args:
            service_name: Name of the service (e.g., "fetchserp")
            user_id: Identifier for the user
            credentials: Credentials object to save
        """
        raise NotImplementedError(
            "This method is optional and not implemented by this client"
        )
