import json
from pathlib import Path
from typing import Any

from staking_reporter.config import to_tokens
from staking_reporter.errors import ProtocolViolationError
from staking_reporter.models import EventKind, StakeEvent, sort_events


def parse_file_event(index: int, item: dict[str, Any], token_values: bool) -> StakeEvent:
    """
    Accepts the exported event format:
    {"eventName": "StakeAdded", "account": "0x...", "value": "100", "timestamp": 1640995200, "blockNum": 123}
    """
    name = item.get("eventName", item.get("kind"))
    try:
        kind = EventKind(name)
    except ValueError:
        raise ProtocolViolationError(
            f"Unsupported event '{name}' at position {index}, account: {item.get('account')}, timestamp: {item.get('timestamp')}"
        )

    value = to_tokens(item["value"]) if token_values else int(item["value"])
    return StakeEvent(
        account=item["account"],
        kind=kind,
        value=value,
        block_number=int(item.get("blockNum", item.get("block_number", 0))),
        timestamp=int(item["timestamp"]),
        # file position keeps events sharing a timestamp in file order
        log_index=index,
        transaction_hash=item.get("transactionHash"),
    )


def load_stake_events(path: str, token_values: bool = False) -> list[StakeEvent]:
    """
    Events from a local JSON list, used to verify the calculations against sample data.
    :param `token_values`: values in the file are whole tokens rather than wei
    """
    data = json.loads(Path(path).read_text())
    events = [parse_file_event(i, item, token_values) for i, item in enumerate(data)]
    print(f"[Stake Events] Loaded {len(events)} events from {path}")
    return sort_events(events)
