"""Built-in exam blueprints and question templates.

Each blueprint describes the section layout of a real competitive exam. The
content provider expands a blueprint into a full ExamConfig by filling each
section with questions generated from the topic templates below.

- SSC CGL Tier 1: 4 sections x 25 questions, 15 minutes each, no switching
- SSC CHSL Tier 1: 4 sections x 25 questions, 15 minutes each, no switching
- IBPS PO Prelims: 30 + 35 + 35 questions, 20 minutes each, no switching
"""

from pydantic import BaseModel

from .exam import Difficulty, MarkingScheme


class SectionBlueprint(BaseModel):
    """Layout of one section before questions are generated."""
    name: str
    duration: int  # seconds
    question_count: int
    topics: list[str]
    cutoff_marks: float | None = None


class ExamBlueprint(BaseModel):
    id: str
    title: str
    description: str
    total_duration: int
    marking: MarkingScheme
    is_sectional_timed: bool = True
    allow_section_switch: bool = False
    show_calculator: bool = False
    instructions: list[str]
    sections: list[SectionBlueprint]


class QuestionTemplate(BaseModel):
    text: str
    options: list[str]
    correct_index: int
    explanation: str
    difficulty: Difficulty


# Expected solve time by difficulty, in seconds
SOLVE_TIMES = {
    Difficulty.EASY: 60,
    Difficulty.MEDIUM: 90,
    Difficulty.HARD: 120,
}

EXAM_BLUEPRINTS: dict[str, ExamBlueprint] = {
    "ssc_cgl_tier1": ExamBlueprint(
        id="ssc_cgl_tier1",
        title="SSC CGL Tier 1",
        description="Staff Selection Commission Combined Graduate Level Tier 1 Examination",
        total_duration=3600,  # 60 minutes
        marking=MarkingScheme(correct=2, incorrect=-0.5, unattempted=0),
        instructions=[
            "This test consists of 4 sections with 25 questions each",
            "Each section has a time limit of 15 minutes",
            "You cannot switch between sections",
            "There is negative marking for wrong answers",
            "Use of calculator is not allowed",
        ],
        sections=[
            SectionBlueprint(
                name="General Intelligence & Reasoning", duration=900, question_count=25,
                topics=["Analogies", "Classification", "Series", "Coding-Decoding", "Blood Relations"],
            ),
            SectionBlueprint(
                name="General Awareness", duration=900, question_count=25,
                topics=["History", "Geography", "Polity", "Economics", "Science"],
            ),
            SectionBlueprint(
                name="Quantitative Aptitude", duration=900, question_count=25,
                topics=["Arithmetic", "Algebra", "Geometry", "Trigonometry", "Statistics"],
            ),
            SectionBlueprint(
                name="English Comprehension", duration=900, question_count=25,
                topics=["Reading Comprehension", "Grammar", "Vocabulary", "Sentence Correction"],
            ),
        ],
    ),
    "ssc_chsl_tier1": ExamBlueprint(
        id="ssc_chsl_tier1",
        title="SSC CHSL Tier 1",
        description="Staff Selection Commission Combined Higher Secondary Level Tier 1 Examination",
        total_duration=3600,
        marking=MarkingScheme(correct=2, incorrect=-0.5, unattempted=0),
        instructions=[
            "This test consists of 4 sections with 25 questions each",
            "Each section has a time limit of 15 minutes",
            "You cannot switch between sections",
            "There is negative marking for wrong answers",
        ],
        sections=[
            SectionBlueprint(
                name="General Intelligence", duration=900, question_count=25,
                topics=["Reasoning", "Logical Thinking", "Problem Solving"],
            ),
            SectionBlueprint(
                name="General Awareness", duration=900, question_count=25,
                topics=["Current Affairs", "History", "Geography", "Science"],
            ),
            SectionBlueprint(
                name="Quantitative Aptitude", duration=900, question_count=25,
                topics=["Mathematics", "Data Interpretation"],
            ),
            SectionBlueprint(
                name="English Language", duration=900, question_count=25,
                topics=["Grammar", "Vocabulary", "Comprehension"],
            ),
        ],
    ),
    "ibps_po_prelims": ExamBlueprint(
        id="ibps_po_prelims",
        title="IBPS PO Prelims",
        description="Institute of Banking Personnel Selection Probationary Officer Preliminary Examination",
        total_duration=3600,
        marking=MarkingScheme(correct=1, incorrect=-0.25, unattempted=0),
        instructions=[
            "This test consists of 3 sections",
            "Each section has a separate time limit",
            "You cannot switch between sections",
            "There is negative marking for wrong answers",
        ],
        sections=[
            SectionBlueprint(
                name="English Language", duration=1200, question_count=30,
                topics=["Reading Comprehension", "Cloze Test", "Error Spotting"],
            ),
            SectionBlueprint(
                name="Quantitative Aptitude", duration=1200, question_count=35,
                topics=["Data Interpretation", "Number Series", "Simplification"],
            ),
            SectionBlueprint(
                name="Reasoning Ability", duration=1200, question_count=35,
                topics=["Puzzles", "Seating Arrangement", "Syllogism"],
            ),
        ],
    ),
}

# Topic -> templates. Topics without their own entry fall back to DEFAULT_TOPIC.
DEFAULT_TOPIC = "Mathematics"

QUESTION_TEMPLATES: dict[str, list[QuestionTemplate]] = {
    "Analogies": [
        QuestionTemplate(
            text="Book : Author :: Painting : ?",
            options=["Canvas", "Artist", "Color", "Frame"],
            correct_index=1,
            explanation="Just as a book is created by an author, a painting is created by an artist.",
            difficulty=Difficulty.EASY,
        ),
        QuestionTemplate(
            text="Thermometer : Temperature :: Barometer : ?",
            options=["Pressure", "Weather", "Rain", "Wind"],
            correct_index=0,
            explanation="A thermometer measures temperature, similarly a barometer measures atmospheric pressure.",
            difficulty=Difficulty.MEDIUM,
        ),
    ],
    "Series": [
        QuestionTemplate(
            text="Find the next number: 2, 6, 12, 20, 30, ?",
            options=["40", "42", "44", "36"],
            correct_index=1,
            explanation="The differences are 4, 6, 8, 10, so the next difference is 12: 30 + 12 = 42.",
            difficulty=Difficulty.MEDIUM,
        ),
        QuestionTemplate(
            text="Find the missing letters: AZ, BY, CX, ?",
            options=["DW", "DV", "EW", "DX"],
            correct_index=0,
            explanation="The first letter moves forward and the second moves backward through the alphabet.",
            difficulty=Difficulty.EASY,
        ),
    ],
    "Mathematics": [
        QuestionTemplate(
            text="What is 15% of 240?",
            options=["36", "32", "38", "34"],
            correct_index=0,
            explanation="15% of 240 = (15/100) x 240 = 36",
            difficulty=Difficulty.EASY,
        ),
        QuestionTemplate(
            text="If the ratio of two numbers is 3:4 and their sum is 84, what is the larger number?",
            options=["36", "48", "42", "52"],
            correct_index=1,
            explanation="Let the numbers be 3x and 4x. Then 7x = 84, so x = 12 and the larger number is 4x = 48.",
            difficulty=Difficulty.MEDIUM,
        ),
        QuestionTemplate(
            text="A sum doubles in 8 years at simple interest. What is the annual rate?",
            options=["10%", "12.5%", "15%", "8%"],
            correct_index=1,
            explanation="Interest equal to the principal over 8 years means 100/8 = 12.5% per year.",
            difficulty=Difficulty.HARD,
        ),
    ],
    "Grammar": [
        QuestionTemplate(
            text="Choose the correct sentence:",
            options=[
                "Neither of the boys were present",
                "Neither of the boys was present",
                "Neither of the boy were present",
                "Neither of the boy was present",
            ],
            correct_index=1,
            explanation='"Neither" is singular and takes a singular verb "was".',
            difficulty=Difficulty.MEDIUM,
        ),
    ],
    "Vocabulary": [
        QuestionTemplate(
            text='Choose the word closest in meaning to "Candid":',
            options=["Frank", "Secretive", "Careful", "Bitter"],
            correct_index=0,
            explanation='"Candid" means truthful and straightforward, as does "frank".',
            difficulty=Difficulty.EASY,
        ),
        QuestionTemplate(
            text='Choose the antonym of "Ephemeral":',
            options=["Fleeting", "Permanent", "Brief", "Delicate"],
            correct_index=1,
            explanation='"Ephemeral" means lasting a very short time; its opposite is "permanent".',
            difficulty=Difficulty.HARD,
        ),
    ],
    "History": [
        QuestionTemplate(
            text="Who founded the Maurya Empire?",
            options=["Ashoka", "Bindusara", "Chandragupta Maurya", "Harsha"],
            correct_index=2,
            explanation="Chandragupta Maurya founded the empire around 322 BCE.",
            difficulty=Difficulty.EASY,
        ),
    ],
    "Geography": [
        QuestionTemplate(
            text="Which is the longest river in the world?",
            options=["Amazon", "Nile", "Yangtze", "Mississippi"],
            correct_index=1,
            explanation="The Nile is generally regarded as the longest river at about 6,650 km.",
            difficulty=Difficulty.EASY,
        ),
    ],
    "Syllogism": [
        QuestionTemplate(
            text="All cats are animals. Some animals are dogs. Which conclusion follows?",
            options=[
                "All cats are dogs",
                "Some dogs are cats",
                "No definite conclusion about cats and dogs",
                "No cat is a dog",
            ],
            correct_index=2,
            explanation="Neither premise connects cats with dogs, so nothing definite follows.",
            difficulty=Difficulty.HARD,
        ),
    ],
}
