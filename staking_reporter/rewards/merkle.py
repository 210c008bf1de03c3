from itertools import zip_longest
from typing import Iterable, Optional, Union

from eth_abi.packed import encode_packed
from eth_utils import decode_hex, encode_hex, keccak, to_checksum_address

from staking_reporter.errors import UnknownAccountError
from staking_reporter.models import (
    AirdropAmount,
    EthereumAddress,
    MerkleClaim,
    MerkleDistribution,
)

HexOrBytes = Union[str, bytes]


def _to_bytes(value: HexOrBytes) -> bytes:
    return decode_hex(value) if isinstance(value, str) else value


def checksummed_amounts(
    amounts: Iterable[tuple[EthereumAddress, int]]
) -> dict[EthereumAddress, int]:
    """Addresses differing only in case are the same account, each must appear once"""
    checksummed: dict[EthereumAddress, int] = {}
    for account, amount in amounts:
        key = to_checksum_address(account)
        if key in checksummed:
            raise ValueError(f"Duplicate account {key} in merkle leaves")
        checksummed[key] = amount
    return checksummed


def hash_leaf(account: EthereumAddress, amount: int) -> bytes:
    """Same as solidity `keccak256(abi.encodePacked(account, amount))`"""
    return keccak(encode_packed(["address", "uint256"], [account, amount]))


def combined_hash(a: Optional[bytes], b: Optional[bytes]) -> Optional[bytes]:
    """Pairs are sorted before hashing, so a proof does not need to carry left/right flags"""
    if a is None:
        return b
    if b is None:
        return a
    return keccak(b"".join(sorted([a, b])))


class MerkleTree:
    """
    Merkle tree over sorted leaves with sorted pair hashing. A node without a sibling
    is moved up unchanged. Matches OpenZeppelin's `MerkleProof.verify`.
    """

    def __init__(self, amounts: dict[EthereumAddress, int]):
        if not amounts:
            raise ValueError("Can not build a merkle tree without leaves")

        checksummed = checksummed_amounts(amounts.items())
        self.leaves = {
            account: hash_leaf(account, amount)
            for account, amount in checksummed.items()
        }
        self.elements = sorted(self.leaves.values())
        self.layers = MerkleTree.get_layers(self.elements)

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    @property
    def hex_root(self) -> str:
        return encode_hex(self.root)

    def get_proof(self, account: EthereumAddress) -> list[str]:
        leaf = self.leaves.get(to_checksum_address(account))
        if leaf is None:
            raise UnknownAccountError(f"Account {account} is not in the merkle tree")

        idx = self.elements.index(leaf)
        proof = []
        for layer in self.layers:
            pair_idx = idx + 1 if idx % 2 == 0 else idx - 1
            if pair_idx < len(layer):
                proof.append(encode_hex(layer[pair_idx]))
            idx //= 2
        return proof

    @staticmethod
    def get_layers(elements: list[bytes]) -> list[list[bytes]]:
        layers = [elements]
        while len(layers[-1]) > 1:
            layers.append(MerkleTree.get_next_layer(layers[-1]))
        return layers

    @staticmethod
    def get_next_layer(elements: list[bytes]) -> list[bytes]:
        return [
            combined_hash(a, b)  # type: ignore
            for a, b in zip_longest(elements[::2], elements[1::2])
        ]


def verify_proof(root: HexOrBytes, leaf: HexOrBytes, proof: list[HexOrBytes]) -> bool:
    computed = _to_bytes(leaf)
    for sibling in proof:
        computed = combined_hash(computed, _to_bytes(sibling))  # type: ignore
    return computed == _to_bytes(root)


def build_merkle_distribution(
    amounts: list[AirdropAmount], snapshot_block: Optional[int] = None
) -> MerkleDistribution:
    """Root, total and a proof for every claimable account"""
    tree = MerkleTree(checksummed_amounts((a.account, int(a.amount)) for a in amounts))
    claims = {
        a.account: MerkleClaim(amount=a.amount, proof=tree.get_proof(a.account))
        for a in amounts
    }
    distribution = MerkleDistribution(
        merkleRoot=tree.hex_root,
        tokenTotal=str(sum(int(a.amount) for a in amounts)),
        claims=claims,
        snapshotBlockNumber=snapshot_block,
    )
    print(f"🌳 merkle root: {tree.hex_root}")
    return distribution
