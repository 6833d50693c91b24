"""
Mood to Spotify Audio Features Mapping

Maps a selected mood and age group to target audio features for Spotify's
/recommendations API.

Audio Features:
- valence: Musical positivity (0.0 = sad/angry, 1.0 = happy/cheerful)
- energy: Intensity and activity (0.0 = calm, 1.0 = energetic)
- danceability: How suitable for dancing (0.0 = least, 1.0 = most)
- acousticness: Confidence the track is acoustic (0.0 - 1.0)
- tempo: Beats per minute (never below TEMPO_FLOOR)

Every mood has a base profile and a list of genre seeds. The age group adds a
small adjustment on top of the base profile; each adjusted field is clamped
right after the adjustment is applied. Base profiles are never modified, every
call builds a new profile.
"""

import random
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

TEMPO_FLOOR = 50.0
BOUNDED_FIELDS = ("valence", "energy", "danceability", "acousticness")


class MoodKey(str, Enum):
    """Moods the front-end can select"""

    HAPPY = "happy"
    ENERGETIC = "energetic"
    CALM = "calm"
    SAD = "sad"
    STRESSED = "stressed"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["MoodKey"]:
        """Case-insensitive lookup. Returns None for unknown moods."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class AgeBracket(str, Enum):
    """Age groups the front-end can select"""

    TEEN = "13-17"
    YOUNG_ADULT = "18-25"
    ADULT = "26-35"
    MIDDLE_AGED = "36-50"
    SENIOR = "50+"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["AgeBracket"]:
        """Returns None for unknown brackets."""
        if not value:
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None


DEFAULT_MOOD = MoodKey.HAPPY
DEFAULT_AGE_GROUP = AgeBracket.YOUNG_ADULT
DEFAULT_GENRES = "pop"


@dataclass(frozen=True)
class AudioFeatureProfile:
    """Target audio features for one recommendation query"""

    valence: float
    energy: float
    danceability: float
    acousticness: float
    tempo: float

    def adjusted(self, adjustment: Mapping[str, float]) -> "AudioFeatureProfile":
        """
        Return a new profile with the adjustment applied.

        Bounded fields are clamped into [0, 1], tempo is floored at TEMPO_FLOOR.
        Fields the adjustment does not mention are left as they are.
        """
        changes: Dict[str, float] = {}
        for field, delta in adjustment.items():
            value = getattr(self, field) + delta
            if field in BOUNDED_FIELDS:
                changes[field] = max(0.0, min(1.0, value))
            elif field == "tempo":
                changes[field] = max(TEMPO_FLOOR, value)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        """Rounded view: two decimals for bounded fields, whole bpm for tempo"""
        return {
            "valence": round(self.valence, 2),
            "energy": round(self.energy, 2),
            "danceability": round(self.danceability, 2),
            "acousticness": round(self.acousticness, 2),
            "tempo": int(round(self.tempo)),
        }


# Mood -> base audio features
MOOD_FEATURES: Mapping[MoodKey, AudioFeatureProfile] = MappingProxyType({
    MoodKey.HAPPY: AudioFeatureProfile(valence=0.8, energy=0.75, danceability=0.85, acousticness=0.15, tempo=120),
    MoodKey.ENERGETIC: AudioFeatureProfile(valence=0.85, energy=0.85, danceability=0.8, acousticness=0.1, tempo=130),
    MoodKey.CALM: AudioFeatureProfile(valence=0.3, energy=0.2, danceability=0.3, acousticness=0.7, tempo=70),
    MoodKey.SAD: AudioFeatureProfile(valence=0.2, energy=0.25, danceability=0.25, acousticness=0.8, tempo=60),
    MoodKey.STRESSED: AudioFeatureProfile(valence=0.35, energy=0.3, danceability=0.4, acousticness=0.6, tempo=75),
})

# Age group -> additive adjustments
AGE_ADJUSTMENTS: Mapping[AgeBracket, Mapping[str, float]] = MappingProxyType({
    AgeBracket.TEEN: MappingProxyType({"danceability": 0.05, "tempo": 10, "energy": 0.03}),
    AgeBracket.YOUNG_ADULT: MappingProxyType({"danceability": 0.02, "tempo": 0, "energy": 0}),
    AgeBracket.ADULT: MappingProxyType({"acousticness": 0.03, "tempo": -5}),
    AgeBracket.MIDDLE_AGED: MappingProxyType({"acousticness": 0.05, "tempo": -10, "energy": -0.05}),
    AgeBracket.SENIOR: MappingProxyType({"acousticness": 0.08, "tempo": -15, "energy": -0.1}),
})

# Mood -> genre seeds (valid Spotify genre seeds)
MOOD_GENRES: Mapping[MoodKey, str] = MappingProxyType({
    MoodKey.HAPPY: "pop,indie-pop,electro-pop",
    MoodKey.ENERGETIC: "dance,electronic,hip-hop",
    MoodKey.CALM: "ambient,indie-folk,acoustic",
    MoodKey.SAD: "indie,alternative,folk",
    MoodKey.STRESSED: "lo-fi,chill-pop,singer-songwriter",
})

# Mood -> short activities suggested next to the tracks
MOOD_ACTIVITIES: Mapping[MoodKey, tuple] = MappingProxyType({
    MoodKey.HAPPY: ("Go for a short walk", "Call a friend", "Dance for 5 minutes"),
    MoodKey.ENERGETIC: ("Quick HIIT (10 mins)", "Go for a run", "Do a cycling sprint"),
    MoodKey.CALM: ("5-minute breathing", "Read for 15 minutes", "Do gentle stretching"),
    MoodKey.SAD: ("Write a short journal entry", "Listen to soothing music", "Take a warm shower"),
    MoodKey.STRESSED: ("Try a 3-minute breathing break", "Declutter one small area", "Make a warm drink"),
})
FALLBACK_ACTIVITY = "Take a break"


class ResolvedFeatures(NamedTuple):
    profile: AudioFeatureProfile
    seed_genres: str

    @property
    def genre_list(self) -> List[str]:
        return [genre for genre in self.seed_genres.split(",") if genre]

    def to_query_params(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """Spotify /recommendations query parameters"""
        rounded = self.profile.to_dict()
        params: Dict[str, Any] = {"seed_genres": self.seed_genres}
        if limit is not None:
            params["limit"] = limit
        params.update({f"target_{name}": value for name, value in rounded.items()})
        return params


def resolve_features(mood: Optional[str], age_group: Optional[str] = None) -> ResolvedFeatures:
    """
    Get target audio features and genre seeds for a mood and age group.

    Args:
        mood: Mood name, matched case-insensitively. Unknown moods use "happy"
            features and the "pop" genre seed.
        age_group: Age bracket such as "26-35". Missing or blank means "18-25"; an
            unknown bracket leaves the base features unchanged.

    Returns:
        ResolvedFeatures with a freshly built profile
    """
    mood_key = MoodKey.parse(mood)
    base = MOOD_FEATURES[mood_key or DEFAULT_MOOD]
    genres = MOOD_GENRES[mood_key] if mood_key else DEFAULT_GENRES

    if age_group is None or not age_group.strip():
        bracket = DEFAULT_AGE_GROUP
    else:
        bracket = AgeBracket.parse(age_group)
    adjustment = AGE_ADJUSTMENTS[bracket] if bracket else {}

    return ResolvedFeatures(profile=base.adjusted(adjustment), seed_genres=genres)


def suggest_activity(mood: Optional[str], rng: Optional[random.Random] = None) -> str:
    """Pick a random activity for the mood"""
    mood_key = MoodKey.parse(mood)
    if mood_key is None:
        return FALLBACK_ACTIVITY
    return (rng or random).choice(MOOD_ACTIVITIES[mood_key])


def describe_moods() -> Dict[str, Any]:
    """Read-only view of the lookup tables for the front-end"""
    return {
        "moods": {
            mood.value: {
                "features": MOOD_FEATURES[mood].to_dict(),
                "seed_genres": MOOD_GENRES[mood],
                "activities": list(MOOD_ACTIVITIES[mood]),
            }
            for mood in MoodKey
        },
        "age_groups": [bracket.value for bracket in AgeBracket],
        "default_age_group": DEFAULT_AGE_GROUP.value,
    }
