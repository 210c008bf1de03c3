import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel

from staking_reporter.models.Config import Config


@dataclass
class Writer:
    config: Config

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def csv_path(self) -> str:
        return f"{self.path}/csv"

    @property
    def json_path(self) -> str:
        return f"{self.path}/json"

    @staticmethod
    def to_serializable(data: Any) -> Any:
        """Reports are pydantic models, the writer only deals in dicts and lists"""
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json")
        if isinstance(data, list):
            return [Writer.to_serializable(d) for d in data]
        return data

    @staticmethod
    def flatten_json(y) -> dict[str, Any]:
        out = {}

        def flatten(x, name=""):
            # nested objects become prefixed columns
            if type(x) is dict:
                for a in x:
                    flatten(x[a], name + a + "_")
            elif type(x) is list:
                for i, a in enumerate(x):
                    flatten(a, name + str(i) + "_")
            else:
                out[name[:-1]] = x

        flatten(y)
        return out

    def flatten_json_array(self, data: list[Any]) -> list[dict[str, Any]]:
        return [self.flatten_json(item) for item in data]

    @staticmethod
    def write_csv(data: list[dict[str, Any]], path: str, fieldnames: list[str]) -> None:
        with open(path, "w+", newline="") as f:
            writer = csv.DictWriter(
                f, delimiter=",", fieldnames=fieldnames, extrasaction="ignore"
            )
            writer.writeheader()
            writer.writerows(data)

    # create the directory in the reports folder for csv and json if it doesn't exist
    def _create_dir(self) -> None:
        Path(self.csv_path).mkdir(parents=True, exist_ok=True)
        Path(self.json_path).mkdir(parents=True, exist_ok=True)

    def to_csv(self, data: list[dict[str, Any]], name: str, fieldnames: list[str]) -> None:
        self._create_dir()
        self.write_csv(data, f"{self.csv_path}/{name}.csv", fieldnames)

    def to_json(self, data: Any, name: str) -> None:
        self._create_dir()
        with open(f"{self.json_path}/{name}.json", "w") as f:
            json.dump(self.to_serializable(data), f, indent=4)

    def to_csv_and_json(self, data: Union[BaseModel, list[Any]], name: str) -> None:
        serializable = self.to_serializable(data)
        if isinstance(serializable, list):
            csv_data = self.flatten_json_array(serializable)
        else:
            csv_data = [self.flatten_json(serializable)]

        # rows of a list may not share all columns, keep the order they first appear in
        keys: list[str] = []
        for row in csv_data:
            keys += [k for k in row.keys() if k not in keys]

        self.to_json(serializable, name)
        self.to_csv(csv_data, name, keys)
        print(f"💾 Saved {name} to {self.path}")
