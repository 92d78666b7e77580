"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/selector.py
Decides which files get written to the output directory.

Decision table per duplicate group (members in enumeration order):
  select_one / select_all      -> members[0]
  copy_unique (no select_one)  -> nothing
  neither                      -> members[1:]
Unique images are selected iff copy_unique is set (select_all implies it).
Nothing is selected when materialization is disabled.
"""

from typing import List

from picsorter.core.models import (
    DuplicateGroup, ImageFile, OutputAction, SelectionReason, SortConfig)


class SelectionPolicy:
    """Turns groups and uniques into an ordered list of OutputAction."""

    def __init__(self, config: SortConfig):
        self.config = config

    def select_from_group(self, group: DuplicateGroup) -> List[ImageFile]:
        """Files of one duplicate group that should be written."""
        if not self.config.materialize or not group.is_duplicate():
            return []
        if self.config.select_one or self.config.select_all:
            return [group.representative]
        if self.config.copy_unique:
            return []
        return group.extras

    def select_unique(self, uniques: List[ImageFile]) -> List[ImageFile]:
        if not self.config.materialize:
            return []
        if self.config.copy_unique or self.config.select_all:
            return list(uniques)
        return []

    def plan(self, groups: List[DuplicateGroup], uniques: List[ImageFile]) -> List[OutputAction]:
        """
        Group actions first (in group order), then unique actions.
        A source path never appears in more than one action.
        """
        actions: List[OutputAction] = []
        seen = set()
        group_reason = SelectionReason.REPRESENTATIVE \
            if (self.config.select_one or self.config.select_all) else SelectionReason.EXTRA

        for group in groups:
            for file in self.select_from_group(group):
                if file.path not in seen:
                    seen.add(file.path)
                    actions.append(OutputAction(file.path, self.config.output_dir, group_reason))

        for file in self.select_unique(uniques):
            if file.path not in seen:
                seen.add(file.path)
                actions.append(OutputAction(file.path, self.config.output_dir, SelectionReason.UNIQUE))

        return actions
