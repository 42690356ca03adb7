"""Milestone ladder for discovery streaks."""

from typing import List

from glyph.models.streak import Achievement

MILESTONES = (3, 7, 14, 30, 60, 100, 365)

_TITLES = {
    3: "Explorer",
    7: "Weekly Wanderer",
    14: "Dedicated Discoverer",
    30: "Monthly Master",
    60: "Seasoned Seeker",
    100: "Exploration Expert",
    365: "Year-Long Legend",
}

_DESCRIPTIONS = {
    3: "Discovered glyphs for 3 days in a row",
    7: "A full week of exploration",
    14: "Two weeks of consistent discovery",
    30: "A month of daily exploration",
    60: "Two months of dedication",
    100: "100 days of exploration mastery",
    365: "A full year of discovery",
}


def milestone_title(days: int) -> str:
    return _TITLES.get(days, f"{days} Day Streak")


def milestone_description(days: int) -> str:
    return _DESCRIPTIONS.get(days, f"Maintain a {days} day discovery streak")


def achievements_for(current: int, longest: int) -> List[Achievement]:
    """Every milestone reached by `longest`, then the next one with current progress."""
    achievements: List[Achievement] = []
    for milestone in MILESTONES:
        if longest >= milestone:
            achievements.append(
                Achievement(
                    milestone=milestone,
                    achieved=True,
                    title=milestone_title(milestone),
                    description=milestone_description(milestone),
                )
            )
            continue
        achievements.append(
            Achievement(
                milestone=milestone,
                achieved=False,
                title=milestone_title(milestone),
                description=milestone_description(milestone),
                progress_toward_next=current,
            )
        )
        break
    return achievements
