"""
Event source service - Single responsibility: Stream events from ROOT files.

Opens a recorded dataset with uproot and yields one Event per entry.
No physics, no orchestration logic.
"""

import logging
from typing import Iterator, Optional, Sequence

import awkward as ak
import uproot
from uproot.deserialization import DeserializationError

from domain.config import DEFAULT_TREE_NAMES
from domain.errors import DataSourceError
from domain.events import Event


class EventStreamHandle:
    """
    Handle on an opened dataset tree.

    ``events()`` can be called repeatedly; each call restarts from the
    first entry and reads forward in chunks of ``step_size`` entries.
    """

    def __init__(self, root_file, tree, file_path: str, step_size: int = 10_000):
        if step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")

        self._root_file = root_file
        self._tree = tree
        self.file_path = file_path
        self.step_size = step_size
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def num_entries(self) -> int:
        return self._tree.num_entries

    @property
    def branch_names(self) -> list[str]:
        return list(self._tree.keys())

    def events(self, branches: Optional[Sequence[str]] = None) -> Iterator[Event]:
        """
        Lazily yield events in entry order.

        Args:
            branches: Branch names to read, or None to read all branches.
                An empty sequence yields events with no branches.

        Yields:
            Event objects, one per tree entry

        Raises:
            DataSourceError: If reading the tree fails
        """
        if branches is not None and len(branches) == 0:
            for entry in range(self.num_entries):
                yield Event(entry=entry)
            return

        read_kwargs = {"step_size": self.step_size, "library": "ak"}
        if branches is not None:
            read_kwargs["filter_name"] = list(branches)

        entry = 0
        try:
            for batch in self._tree.iterate(**read_kwargs):
                self.logger.debug(
                    f"Read entries {entry}-{entry + len(batch)} from {self.file_path}"
                )
                columns = _flatten_record_fields(batch)
                if not columns:
                    for _ in range(len(batch)):
                        yield Event(entry=entry)
                        entry += 1
                    continue

                names = list(columns)
                for values in zip(*(ak.to_list(columns[name]) for name in names)):
                    yield Event(entry=entry, branches=dict(zip(names, values)))
                    entry += 1
        except (OSError, ValueError, KeyError, DeserializationError) as e:
            raise DataSourceError(
                f"Failed reading {self.file_path} at entry {entry}: {e}"
            ) from e

    def close(self):
        """Release the underlying file."""
        self._root_file.close()

    def __enter__(self) -> 'EventStreamHandle':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def open_event_stream(
    file_path: str,
    tree_names: Sequence[str] = DEFAULT_TREE_NAMES,
    step_size: int = 10_000
) -> EventStreamHandle:
    """
    Open a ROOT dataset and return a stream handle over its data tree.

    Args:
        file_path: Path or URI to ROOT file
        tree_names: Possible tree names, first match wins
        step_size: Number of entries read per chunk

    Returns:
        EventStreamHandle over the first matching tree

    Raises:
        DataSourceError: If the file cannot be opened or has no data tree
    """
    try:
        root_file = uproot.open(file_path)
    except (OSError, ValueError) as e:
        raise DataSourceError(f"Cannot open dataset {file_path}: {e}") from e

    tree_name = _get_data_tree_name(root_file.keys(), tree_names)
    if tree_name is None:
        root_file.close()
        raise DataSourceError(
            f"None of the trees {list(tree_names)} found in {file_path}"
        )

    logging.info(f"Opened {file_path}: tree '{tree_name}'")
    return EventStreamHandle(root_file, root_file[tree_name], file_path, step_size)


def _get_data_tree_name(
    root_file_keys: list[str],
    possible_tree_names: Sequence[str]
) -> Optional[str]:
    available_trees = [key.split(";")[0] for key in root_file_keys]

    for tree_name in possible_tree_names:
        if tree_name in available_trees:
            return tree_name

    return None


def _flatten_record_fields(batch) -> dict:
    """
    Map each returned field to its column, splitting records into sub-fields.

    Split branches such as ``Jet.px`` come back from uproot as a ``Jet``
    record; its fields are keyed ``Jet.px`` again so that events carry the
    same names as the tree.
    """
    columns = {}
    for name in ak.fields(batch):
        column = batch[name]
        sub_fields = ak.fields(column)
        if not sub_fields:
            columns[name] = column
            continue
        for sub in sub_fields:
            key = sub if sub.startswith(f"{name}.") else f"{name}.{sub}"
            columns[key] = column[sub]
    return columns
