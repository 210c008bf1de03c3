from typing import Literal, Union

# type aliases for clarity
EthereumAddress = str
BigNumber = str
Timestamp = int
BlockIdentifier = Union[int, Literal["latest"]]
