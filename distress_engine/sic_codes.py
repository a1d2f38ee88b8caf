"""
Target SIC 2007 codes for the distress scan.

Hospitality, nightlife, childcare and leisure operators: the sectors whose
premises the dashboard tracks.
"""

from typing import Dict, Tuple

SIC_DESCRIPTIONS: Dict[str, str] = {
    '56101': 'Licensed restaurants',
    '56102': 'Unlicensed restaurants and cafes',
    '56103': 'Take-away food shops and mobile food stands',
    '56104': 'Mobile food stands',
    '56301': 'Licensed clubs',
    '56302': 'Public houses and bars',
    '56210': 'Event catering activities',
    '56290': 'Other food services',
    '85100': 'Pre-primary education (nurseries)',
    '93110': 'Operation of sports facilities (gymnasiums)',
    '93130': 'Fitness facilities',
    '93290': 'Other amusement and recreation activities',
    '90040': 'Operation of arts facilities',
    '91020': 'Museums activities',
}

# Scan order matters: results are reported positionally in this order.
TARGET_SIC_CODES: Tuple[str, ...] = tuple(SIC_DESCRIPTIONS)


def describe(code: str) -> str:
    """Return a human-readable label for a SIC code, or the code itself."""
    return SIC_DESCRIPTIONS.get(code, code)
