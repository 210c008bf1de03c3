import os
from dotenv import load_dotenv
from staking_reporter.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str) -> str:
    """
    Attempt to fetch an environment variable and throw
    an error if not found
    """
    var = os.environ.get(accessor)
    if not var:
        raise MissingEnvironmentVariableException(accessor)
    return var


def rpc_url() -> str:
    return env_var("RPC_URL")


class COVALENTHQ:
    @staticmethod
    def base_url() -> str:
        return env_var("COVALENTHQ_BASE_URL")

    @staticmethod
    def api_key() -> str:
        return env_var("COVALENTHQ_API_KEY")
