# mediminder/models/enums.py
from enum import Enum

class Topic(str, Enum):
    """Knowledge area a quiz question is classified into."""
    DOSAGE = "Dosage"
    TIMING = "Timing"
    MISSED_DOSES = "Missed Doses"
    SIDE_EFFECTS = "Side Effects"
    INTERACTIONS = "Interactions"
    STORAGE = "Storage"
    GENERAL_KNOWLEDGE = "General Knowledge"

class PriorityLevel(str, Enum):
    """Education priority derived from a medication's miss rate."""
    HIGH = "High Priority"
    MEDIUM = "Medium Priority"
    LOW = "Low Priority"

class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
