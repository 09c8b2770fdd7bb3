"""
Local standards libraries used to seed the metric_standard catalog.

Sources:
    ACSM's Guidelines for Exercise Testing and Prescription, 11th ed. (VO2max percentiles)
    ExRx strength standards (Kilgore-Rippetoe bodyweight ratios)
    WHO BMI classification, ACE body fat percentage chart
    AHA resting heart rate guidance
    Jack Daniels' Running Formula (VDOT benchmarks)
"""

from typing import Any, Dict, List

ACSM_SOURCE = {
    "source_name": "American College of Sports Medicine (ACSM)",
    "source_url": "https://www.acsm.org/education-resources/books/guidelines-exercise-testing-prescription",
    "source_description": "ACSM's Guidelines for Exercise Testing and Prescription, 11th Edition",
    "evidence_level": "professional_org",
    "confidence_score": 1.0,
}

EXRX_SOURCE = {
    "source_name": "ExRx",
    "source_url": "https://exrx.net/Testing/WeightLifting/StrengthStandards",
    "source_description": "ExRx Strength Level Standards (Kilgore-Rippetoe)",
    "evidence_level": "professional_org",
    "confidence_score": 0.85,
}

WHO_ACE_SOURCE = {
    "source_name": "WHO/ACE",
    "source_url": "https://www.who.int/news-room/fact-sheets/detail/obesity-and-overweight",
    "source_description": "WHO BMI Guidelines and ACE Body Fat Percentage Charts",
    "evidence_level": "professional_org",
    "confidence_score": 1.0,
}

AHA_SOURCE = {
    "source_name": "American Heart Association (AHA)",
    "source_url": "https://www.heart.org/en/healthy-living/fitness/fitness-basics/target-heart-rates",
    "source_description": "AHA resting heart rate guidance for adults",
    "evidence_level": "professional_org",
    "confidence_score": 1.0,
}

DANIELS_SOURCE = {
    "source_name": "Jack Daniels",
    "source_url": "https://runsmartproject.com/calculator/",
    "source_description": "Jack Daniels' Running Formula - VDOT running calculator and training paces",
    "evidence_level": "professional_org",
    "confidence_score": 1.0,
}

# (age_min, age_max) -> gender -> [(percentile, level, value_min, value_max)]
VO2MAX_PERCENTILES = {
    (20, 29): {
        "male": [(80, "excellent", 51.0, 55.9), (60, "good", 45.2, 51.0), (40, "fair", 41.0, 45.2)],
        "female": [(80, "excellent", 43.9, 49.6), (60, "good", 39.5, 43.9), (40, "fair", 35.5, 39.5)],
    },
    (30, 39): {
        "male": [(80, "excellent", 48.0, 54.0), (60, "good", 44.0, 48.0), (40, "fair", 40.0, 44.0)],
        "female": [(80, "excellent", 42.4, 47.4), (60, "good", 37.8, 42.4), (40, "fair", 34.2, 37.8)],
    },
    (40, 49): {
        "male": [(80, "excellent", 46.8, 52.5), (60, "good", 42.4, 46.8), (40, "fair", 38.5, 42.4)],
        "female": [(80, "excellent", 39.7, 45.3), (60, "good", 36.3, 39.7), (40, "fair", 32.8, 36.3)],
    },
    (50, 59): {
        "male": [(80, "excellent", 43.4, 48.9), (60, "good", 39.2, 43.4), (40, "fair", 35.3, 39.2)],
        "female": [(80, "excellent", 36.7, 41.0), (60, "good", 33.0, 36.7), (40, "fair", 30.2, 33.0)],
    },
    (60, 69): {
        "male": [(80, "excellent", 39.5, 45.7), (60, "good", 35.5, 39.5), (40, "fair", 31.8, 35.5)],
        "female": [(80, "excellent", 32.9, 37.8), (60, "good", 29.4, 32.9), (40, "fair", 26.9, 29.4)],
    },
}

# metric_key -> gender -> {level: bodyweight multiplier}
STRENGTH_RATIOS = {
    "squat_1rm": {
        "male": {"novice": 1.5, "intermediate": 2.0, "advanced": 2.5},
        "female": {"novice": 1.0, "intermediate": 1.35, "advanced": 1.75},
    },
    "bench_press_1rm": {
        "male": {"novice": 1.0, "intermediate": 1.35, "advanced": 1.75},
        "female": {"novice": 0.6, "intermediate": 0.8, "advanced": 1.0},
    },
    "deadlift_1rm": {
        "male": {"novice": 1.75, "intermediate": 2.25, "advanced": 2.75},
        "female": {"novice": 1.15, "intermediate": 1.5, "advanced": 1.9},
    },
}

BMI_RANGES = [
    ("underweight", 0.0, 18.5),
    ("normal", 18.5, 24.9),
    ("overweight", 25.0, 29.9),
    ("obese_class_1", 30.0, 34.9),
]

BODY_FAT_RANGES = {
    "male": [("athlete", 6, 13), ("fitness", 14, 17), ("average", 18, 24)],
    "female": [("athlete", 14, 20), ("fitness", 21, 24), ("average", 25, 31)],
}

# Resting heart rate bands (bpm), all adults
RESTING_HR_RANGES = [
    ("athlete", 40, 54),
    ("fitness", 55, 64),
    ("average", 65, 74),
]


def vo2max_standards() -> List[Dict[str, Any]]:
    rows = []
    for (age_min, age_max), by_gender in VO2MAX_PERCENTILES.items():
        for gender, bands in by_gender.items():
            for percentile, level, value_min, value_max in bands:
                rows.append({
                    "metric_key": "vo2max",
                    "standard_type": "percentile",
                    "category": "cardio",
                    "age_min": age_min,
                    "age_max": age_max,
                    "gender": gender,
                    "value_min": value_min,
                    "value_max": value_max,
                    "unit": "ml/kg/min",
                    "percentile": percentile,
                    "level": level,
                    **ACSM_SOURCE,
                })
    return rows


def strength_standards() -> List[Dict[str, Any]]:
    rows = []
    for metric_key, by_gender in STRENGTH_RATIOS.items():
        for gender, levels in by_gender.items():
            for level, multiplier in levels.items():
                rows.append({
                    "metric_key": metric_key,
                    "standard_type": "bodyweight_ratio",
                    "category": "strength",
                    "gender": gender,
                    "value_single": multiplier,
                    "unit": "x bodyweight",
                    "level": level,
                    **EXRX_SOURCE,
                })
    return rows


def body_composition_standards() -> List[Dict[str, Any]]:
    rows = [
        {
            "metric_key": "bmi",
            "standard_type": "absolute_value",
            "category": "body_comp",
            "gender": "all",
            "value_min": value_min,
            "value_max": value_max,
            "unit": "kg/m2",
            "level": level,
            **WHO_ACE_SOURCE,
        }
        for level, value_min, value_max in BMI_RANGES
    ]
    for gender, bands in BODY_FAT_RANGES.items():
        for level, value_min, value_max in bands:
            rows.append({
                "metric_key": "body_fat_pct",
                "standard_type": "absolute_value",
                "category": "body_comp",
                "gender": gender,
                "value_min": float(value_min),
                "value_max": float(value_max),
                "unit": "%",
                "level": level,
                **WHO_ACE_SOURCE,
            })
    return rows


def heart_rate_standards() -> List[Dict[str, Any]]:
    return [
        {
            "metric_key": "resting_hr",
            "standard_type": "absolute_value",
            "category": "cardio",
            "gender": "all",
            "age_min": 18,
            "value_min": float(value_min),
            "value_max": float(value_max),
            "unit": "bpm",
            "level": level,
            **AHA_SOURCE,
        }
        for level, value_min, value_max in RESTING_HR_RANGES
    ]


# Not age or gender specific; 999 marks the open top band
VDOT_LEVELS = [
    ("beginner", 25, 35),
    ("recreational", 35, 45),
    ("intermediate", 45, 55),
    ("advanced", 55, 65),
    ("elite", 65, 75),
    ("world_class", 75, 999),
]


def vdot_standards() -> List[Dict[str, Any]]:
    return [
        {
            "metric_key": "vdot",
            "standard_type": "absolute_value",
            "category": "running",
            "gender": "all",
            "value_min": float(value_min),
            "value_max": float(value_max),
            "unit": "vdot",
            "level": level,
            **DANIELS_SOURCE,
        }
        for level, value_min, value_max in VDOT_LEVELS
    ]

def all_seed_standards() -> List[Dict[str, Any]]:
    return (
        vo2max_standards()
        + strength_standards()
        + body_composition_standards()
        + heart_rate_standards()
        + vdot_standards()
    )
