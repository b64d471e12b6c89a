"""
Match Scoring - pluggable profile/gig scoring functions

Orchestration only depends on the ``MatchScorer`` protocol:

    score(profile, gig) -> float in [0, 100)

Scorers:
    - RandomScorer (default): uniform random score, rounded to 2 decimals.
      This is a stand-in ranking with no skill logic at all.
    - SkillOverlapScorer: share of the gig's required skills found in the
      profile (synonym-aware), blended with a location match.

Select one with the MATCHING_SCORER setting ("random" or "skills").
"""

import random
import re
from typing import Dict, Iterable, List, Optional, Protocol, Set

# Canonical skill -> synonyms. Matching is case-insensitive and whole-word.
SKILL_SYNONYMS: Dict[str, List[str]] = {
    "python": ["py", "python3"],
    "javascript": ["js", "ecmascript", "es6"],
    "typescript": ["ts"],
    "react": ["reactjs", "react.js", "next.js", "nextjs"],
    "node": ["nodejs", "node.js", "express"],
    "sql": ["postgres", "postgresql", "mysql"],
    "aws": ["amazon web services", "ec2", "s3", "lambda"],
    "docker": ["containers", "containerization"],
    "kubernetes": ["k8s", "helm"],
    "design": ["graphic design", "ui design", "logo design"],
    "copywriting": ["copy", "content writing", "blogging"],
    "data entry": ["data-entry", "typing"],
    "marketing": ["social media", "seo", "digital marketing"],
    "video editing": ["video", "premiere", "final cut"],
}

SKILLS_WEIGHT = 0.8
LOCATION_WEIGHT = 0.2


class MatchScorer(Protocol):
    def score(self, profile, gig) -> float:
        ...


def normalize_skill(skill: str) -> str:
    """Map a skill or one of its synonyms onto its canonical name."""
    skill_lower = skill.strip().lower()
    for canonical, synonyms in SKILL_SYNONYMS.items():
        if skill_lower == canonical or skill_lower in synonyms:
            return canonical
    return skill_lower


def normalize_skills(skills: Optional[Iterable[str]]) -> Set[str]:
    return {normalize_skill(s) for s in (skills or []) if s and s.strip()}


def skills_in_text(text: str) -> Set[str]:
    """Canonical skills mentioned anywhere in free text."""
    if not text:
        return set()

    text_lower = text.lower()
    found = set()
    for canonical, synonyms in SKILL_SYNONYMS.items():
        for term in [canonical, *synonyms]:
            pattern = r'\b' + re.escape(term) + r'\b'
            if re.search(pattern, text_lower):
                found.add(canonical)
                break
    return found


def match_location(gig_location: Optional[str], gig_remote: bool, profile_location: Optional[str]) -> float:
    """Calculate location match score (0-1)"""
    if gig_remote:
        return 1.0  # Remote gigs fit any location
    if not gig_location or not profile_location:
        return 0.5  # Neutral if unknown

    gig_loc = gig_location.lower()
    profile_loc = profile_location.lower()
    if gig_loc in profile_loc or profile_loc in gig_loc:
        return 1.0
    return 0.0


class RandomScorer:
    """Uniform random score in [0, 100)."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def score(self, profile, gig) -> float:
        return round(self.rng.random() * 100, 2)


class SkillOverlapScorer:
    """
    Score = 100 * (skills_weight * overlap + location_weight * location)

    overlap is |required ∩ offered| / |required|; when the gig lists no
    skills, skills mentioned in its title and description are used
    instead, and a gig with no detectable skills scores 0.5 overlap.
    """

    def __init__(self, skills_weight: float = SKILLS_WEIGHT, location_weight: float = LOCATION_WEIGHT):
        self.skills_weight = skills_weight
        self.location_weight = location_weight

    def score(self, profile, gig) -> float:
        required = normalize_skills(gig.skills_required)
        if not required:
            required = skills_in_text(f"{gig.title or ''} {gig.description or ''}")
        offered = normalize_skills(profile.skills)

        if required:
            overlap = len(required & offered) / len(required)
        else:
            overlap = 0.5  # Neutral if nothing to compare

        location = match_location(gig.location, gig.remote, profile.location)
        composite = overlap * self.skills_weight + location * self.location_weight
        # Keep the documented half-open range
        return round(min(composite * 100, 99.99), 2)


def get_scorer(name: str = "random", rng: Optional[random.Random] = None) -> MatchScorer:
    if name == "random":
        return RandomScorer(rng)
    if name == "skills":
        return SkillOverlapScorer()
    raise ValueError(f"Unknown matching scorer: {name}")
