"""Body measurement helpers used by callers before a patient record is written."""
from typing import Optional


def calculate_bmi(height_cm: Optional[float], weight_kg: Optional[float]) -> Optional[float]:
    """BMI = weight(kg) / height(m)², rounded to 2 decimals.

    Returns None unless both measurements are present and positive.
    """
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return None
    height_m = height_cm / 100.0
    return round(weight_kg / (height_m * height_m), 2)
