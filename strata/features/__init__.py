"""Model features package"""

from strata.features.base_feature import ModelFeature
from strata.features.timestamp_feature import TimestampFeature

__all__ = ["ModelFeature", "TimestampFeature"]
