"""Base class for hooks a model runs before writing rows"""

from typing import Any


class ModelFeature:
    """
    Hook into the INSERT and UPDATE statements a model issues.

    A model passes the stored values of every write through each of its
    features in order, so a feature can add or rewrite columns (the built-in
    TimestampFeature fills `created` and `updated`).
    """

    def before_create(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Called with the column values of a row about to be inserted.

        Returns:
            The values to insert
        """
        return data

    def before_update(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Called with the columns an UPDATE will set, for one row or a batch.

        Returns:
            The values to set
        """
        return data
