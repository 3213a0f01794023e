"""Keyword-containment rules used when no AI model is consulted.

Each subject area has trigger keywords, a few canonical sub-concepts and one
pre-authored quiz question. Matching is plain substring search over
lower-cased text, so results are only a rough stand-in for real analysis.
"""
from dataclasses import dataclass

from app.domain.enums import GapStatus


@dataclass(frozen=True)
class CanonicalConcept:
    """A sub-concept judged by two term lists.

    ``anchors``: any one present means the concept was mentioned (partially covered).
    ``details``: all present means the concept was explained (covered). A detail
    term on its own does not count as a mention.
    """

    name: str
    description: str
    anchors: tuple[str, ...]
    details: tuple[str, ...]

    def assess(self, transcript: str) -> GapStatus:
        if self.details and all(term in transcript for term in self.details):
            return GapStatus.COVERED
        if any(term in transcript for term in self.anchors):
            return GapStatus.PARTIALLY_COVERED
        return GapStatus.NOT_COVERED


@dataclass(frozen=True)
class SubjectArea:
    name: str
    keywords: tuple[str, ...]
    concepts: tuple[CanonicalConcept, ...]
    question: dict

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


SUBJECT_AREAS: tuple[SubjectArea, ...] = (
    SubjectArea(
        name="physics",
        keywords=("newton", "force", "gravity", "physics", "inertia", "acceleration", "velocity", "f=ma"),
        concepts=(
            CanonicalConcept(
                name="Newton's Laws of Motion",
                description="The three laws describing how forces change the motion of objects.",
                anchors=("newton",),
                details=("first law", "second law", "third law"),
            ),
            CanonicalConcept(
                name="Newton's Second Law",
                description="The relationship between force, mass and acceleration: F = ma",
                anchors=("second law", "f=ma", "f = ma"),
                details=("force", "mass", "acceleration"),
            ),
            CanonicalConcept(
                name="Newton's Third Law",
                description="For every action, there is an equal and opposite reaction.",
                anchors=("third law", "reaction"),
                details=("equal", "opposite", "reaction"),
            ),
            CanonicalConcept(
                name="Inertial Reference Frames",
                description="The concept of reference frames where Newton's laws apply.",
                anchors=("inertia", "frame"),
                details=("inertial", "reference frame"),
            ),
        ),
        question={
            "id": "physics-1",
            "question": "What is another name for Newton's First Law?",
            "options": [
                "Law of Acceleration",
                "Law of Inertia",
                "Law of Action-Reaction",
                "Law of Conservation",
            ],
            "correct_option": 1,
        },
    ),
    SubjectArea(
        name="math",
        keywords=("math", "equation", "algebra", "calculus", "derivative", "integral", "geometry", "theorem"),
        concepts=(
            CanonicalConcept(
                name="Derivatives",
                description="The instantaneous rate of change of a function.",
                anchors=("derivative", "slope"),
                details=("rate of change", "limit"),
            ),
            CanonicalConcept(
                name="Integrals",
                description="Accumulation of quantities, such as the area under a curve.",
                anchors=("integral", "area under"),
                details=("area", "accumulat"),
            ),
            CanonicalConcept(
                name="Solving Equations",
                description="Isolating an unknown by applying the same operation to both sides.",
                anchors=("equation", "variable"),
                details=("both sides", "isolate"),
            ),
        ),
        question={
            "id": "math-1",
            "question": "What does the derivative of a function describe?",
            "options": [
                "The area under its curve",
                "Its instantaneous rate of change",
                "Its maximum value",
                "The number of its roots",
            ],
            "correct_option": 1,
        },
    ),
    SubjectArea(
        name="programming",
        keywords=("programming", "code", "function", "variable", "loop", "algorithm", "python", "javascript"),
        concepts=(
            CanonicalConcept(
                name="Variables and Types",
                description="Named storage for values and the kinds of values they can hold.",
                anchors=("variable",),
                details=("variable", "type", "value"),
            ),
            CanonicalConcept(
                name="Control Flow",
                description="How conditionals and loops decide which code runs and how often.",
                anchors=("loop", "if statement", "condition"),
                details=("loop", "condition"),
            ),
            CanonicalConcept(
                name="Functions",
                description="Reusable blocks of code that take inputs and return outputs.",
                anchors=("function",),
                details=("function", "parameter", "return"),
            ),
        ),
        question={
            "id": "programming-1",
            "question": "What is the main purpose of a loop in a program?",
            "options": [
                "To store a single value",
                "To repeat a block of code",
                "To define a new data type",
                "To end the program early",
            ],
            "correct_option": 1,
        },
    ),
    SubjectArea(
        name="biology",
        keywords=("biology", "cell", "mitochondria", "dna", "photosynthesis", "organism", "evolution", "protein"),
        concepts=(
            CanonicalConcept(
                name="Cell Structure",
                description="The organelles that make up a cell and what each one does.",
                anchors=("cell",),
                details=("nucleus", "membrane", "mitochondria"),
            ),
            CanonicalConcept(
                name="Cellular Respiration",
                description="How mitochondria turn glucose and oxygen into usable energy (ATP).",
                anchors=("mitochondria", "respiration"),
                details=("energy", "atp"),
            ),
            CanonicalConcept(
                name="DNA and Genetics",
                description="How genetic information is stored in DNA and passed on.",
                anchors=("dna", "gene"),
                details=("dna", "gene", "inherit"),
            ),
        ),
        question={
            "id": "biology-1",
            "question": "Which organelle is known as the powerhouse of the cell?",
            "options": ["Nucleus", "Ribosome", "Mitochondria", "Golgi apparatus"],
            "correct_option": 2,
        },
    ),
)

GENERIC_GAP = {
    "concept": "Core Principles",
    "description": "The fundamental ideas of the topic, explained in your own words with examples.",
    "status": GapStatus.PARTIALLY_COVERED,
}

GENERIC_QUESTION = {
    "id": "general-1",
    "question": "What is the first step of the Feynman technique?",
    "options": [
        "Memorize the textbook definition",
        "Explain the concept in simple terms as if teaching someone else",
        "Take a practice exam",
        "Read the material a second time",
    ],
    "correct_option": 1,
}


def matching_subjects(text: str) -> list[SubjectArea]:
    """Subject areas whose keywords appear in ``text`` (case-insensitive)."""
    lowered = text.lower()
    return [area for area in SUBJECT_AREAS if area.matches(lowered)]


def concepts_in(text: str) -> list[str]:
    """Canonical concept names for every subject area mentioned in ``text``."""
    return [concept.name for area in matching_subjects(text) for concept in area.concepts]


def assess_gaps(material_text: str, transcript: str) -> list[dict]:
    """Flag canonical sub-concepts the transcript has not fully covered.

    A subject is in play when its keywords appear in either the materials or
    the transcript. Covered concepts are not reported. With no subject in play
    a single generic "Core Principles" gap is returned.
    """
    lowered_transcript = transcript.lower()
    areas = matching_subjects(f"{material_text}\n{transcript}")
    if not areas:
        return [dict(GENERIC_GAP)]

    gaps = []
    for area in areas:
        for concept in area.concepts:
            status = concept.assess(lowered_transcript)
            if status is GapStatus.COVERED:
                continue
            gaps.append({"concept": concept.name, "description": concept.description, "status": status})
    return gaps


def pick_quiz_questions(transcript: str) -> list[dict]:
    """One pre-authored question per subject mentioned, else a generic one."""
    areas = matching_subjects(transcript)
    if not areas:
        return [dict(GENERIC_QUESTION)]
    return [dict(area.question) for area in areas]
