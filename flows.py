from __future__ import annotations

from typing import Any, Mapping

from questionnaire import FieldSpec, FlowSpec, StepSpec

# Career Path (advanced flow)
CAREER_CLASS_LEVELS = ("8th", "9th", "10th", "11th", "12th", "Undergraduate", "Graduate")
CAREER_STREAM_LEVELS = {"11th", "12th", "Undergraduate"}
INTEREST_OPTIONS = (
    "Technology",
    "Science",
    "Arts",
    "Literature",
    "Mathematics",
    "Social Sciences",
    "Business",
    "Healthcare",
    "Engineering",
    "Design",
    "Environment",
    "Sports",
)
STRENGTH_OPTIONS = (
    "Problem Solving",
    "Creativity",
    "Communication",
    "Leadership",
    "Analytical Thinking",
    "Technical Skills",
    "Teamwork",
    "Attention to Detail",
    "Critical Thinking",
    "Organization",
)
ENVIRONMENT_OPTIONS = (
    "Office/Corporate",
    "Remote/Work",
    "Field Work",
    "Laboratory",
    "Creative Studio",
    "Classroom",
)
GOAL_OPTIONS = ("Job", "Higher Studies")

# Basic career form
FORM_CLASS_LEVELS = ("Class 8", "Class 9", "Class 10", "Class 11", "Class 12", "UnderGraduate", "PostGraduate")
FORM_STREAM_OPTIONS = ("Science", "Commerce", "Arts", "Other")

# Aptitude quiz setup
QUIZ_CLASS_LEVELS = ("Class 8", "Class 9", "Class 10", "Class 11", "Class 12")
QUIZ_STREAM_LEVELS = {"Class 11", "Class 12"}
QUIZ_STREAM_OPTIONS = ("Science", "Commerce", "Arts")
QUIZ_SUB_STREAM_OPTIONS = ("PCM", "PCB")

# Notes browser
NOTES_STREAM_CLASSES = {"class 11th", "class 12th", "undergraduate", "postgraduate"}

# Fee structure
INSTITUTION_TYPES = ("School", "College")

TEST_TYPES = ("General", "Specific")

CAREER_DATA: dict[str, dict[str, list[str]]] = {
    "Information Technology": {
        "Software Developer/Engineer": ["Frontend", "Backend", "Full-Stack", "Mobile App"],
        "Data Science": ["Data Scientist", "Machine Learning", "Analyst"],
        "Cybersecurity": ["Analyst", "Ethical Hacker", "Security Architect"],
    },
    "Healthcare": {
        "Doctor": ["Cardiology", "Neurology", "General", "Pediatrics"],
        "Nursing": ["Registered Nurse", "Critical Care"],
        "Pharmacy": ["Clinical", "Retail"],
    },
    "Engineering": {
        "Mechanical": ["Automotive", "Robotics", "HVAC"],
        "Civil": ["Structural", "Transportation", "Environmental"],
        "Electrical": ["Power Systems", "Electronics"],
    },
    "Business": {
        "Finance": ["Analyst", "Investment Banker", "Accountant"],
        "Marketing": ["Digital Marketing", "Brand Manager", "SEO"],
        "Management": ["HR", "Operations", "Project Management"],
    },
}


def jobs_for_sector(sector: str) -> list[str]:
    return list(CAREER_DATA.get(sector, {}).keys())


def specializations_for(sector: str, job: str) -> list[str]:
    return list(CAREER_DATA.get(sector, {}).get(job, []))


def _specific_path_validator(answers: Mapping[str, Any], flags: Mapping[str, bool]) -> dict[str, str]:
    if not flags.get("is_specific"):
        return {}
    job = answers.get("job")
    specialization = answers.get("specialization")
    if not job or not specialization:
        return {"specialization": "Please select a specific career path."}
    if specialization not in specializations_for(answers.get("sector", ""), job):
        return {"specialization": "Please select a specific career path."}
    return {}


def _digits_only(value: Any) -> bool:
    return str(value or "").isdigit()


def _age_validator(answers: Mapping[str, Any], flags: Mapping[str, bool]) -> dict[str, str]:
    age = answers.get("age")
    if age in (None, "") or _digits_only(age):
        return {}
    return {"age": "Please enter your age in years."}


CAREER_PATH = FlowSpec(
    name="career_path",
    steps=(
        StepSpec(
            key="basics",
            title="Tell us about yourself",
            fields=(
                FieldSpec("name", label="Name", message="Please enter your name."),
                FieldSpec("class_level", kind="single", label="Class", options=CAREER_CLASS_LEVELS),
                FieldSpec("stream", label="Stream", required_when="requires_stream", message="Please enter your stream."),
                FieldSpec("marks", label="Marks", message="Please enter your marks."),
            ),
        ),
        StepSpec(
            key="interests",
            title="What are you interested in?",
            fields=(
                FieldSpec(
                    "interests",
                    kind="multi",
                    label="Interests",
                    limit=3,
                    options=INTEREST_OPTIONS,
                    message="Please select at least one interest.",
                ),
            ),
        ),
        StepSpec(
            key="preferences",
            title="Strengths and work style",
            fields=(
                FieldSpec(
                    "strengths",
                    kind="multi",
                    label="Strengths",
                    limit=3,
                    options=STRENGTH_OPTIONS,
                    message="Please select at least one strength.",
                ),
                FieldSpec(
                    "environment",
                    kind="multi",
                    label="Environment",
                    limit=2,
                    options=ENVIRONMENT_OPTIONS,
                    message="Please select at least one environment.",
                ),
            ),
        ),
        StepSpec(
            key="goal",
            title="What is your goal?",
            fields=(FieldSpec("goal", kind="single", label="Goal", options=GOAL_OPTIONS, message="Please choose a goal."),),
        ),
    ),
    defaults={"class_level": "12th"},
    branch_rules={"requires_stream": lambda answers: answers.get("class_level") in CAREER_STREAM_LEVELS},
)

# "Change path" on the results reopens this step with every earlier answer kept.
CAREER_PATH_GOAL_STEP = next(i for i, step in enumerate(CAREER_PATH.steps) if step.key == "goal")

CAREER_FORM = FlowSpec(
    name="career_form",
    steps=(
        StepSpec(
            key="profile",
            title="Find your career",
            fields=(
                FieldSpec("full_name", label="Full name"),
                FieldSpec("class_level", kind="single", label="Class", options=FORM_CLASS_LEVELS),
                FieldSpec("stream", kind="single", label="Stream", options=FORM_STREAM_OPTIONS, required_when="requires_stream"),
                FieldSpec("marks", kind="number", label="Marks", minimum=40, maximum=100),
            ),
        ),
    ),
    defaults={"marks": 50},
    branch_rules={"requires_stream": lambda answers: answers.get("class_level") not in {"Class 8", "Class 9", "Class 10", "", None}},
)

QUIZ_SETUP = FlowSpec(
    name="quiz_setup",
    steps=(
        StepSpec(
            key="setup",
            title="Aptitude test setup",
            fields=(
                FieldSpec("name", label="Name", required=False),
                FieldSpec("class_level", kind="single", label="Class", options=QUIZ_CLASS_LEVELS),
                FieldSpec("stream", kind="single", label="Stream", options=QUIZ_STREAM_OPTIONS, required_when="requires_stream"),
                FieldSpec(
                    "sub_stream",
                    kind="single",
                    label="Subject group",
                    options=QUIZ_SUB_STREAM_OPTIONS,
                    required_when="requires_sub_stream",
                ),
            ),
        ),
    ),
    branch_rules={
        "requires_stream": lambda answers: answers.get("class_level") in QUIZ_STREAM_LEVELS,
        "requires_sub_stream": lambda answers: answers.get("class_level") in QUIZ_STREAM_LEVELS
        and answers.get("stream") == "Science",
    },
    cascades={"class_level": ("stream", "sub_stream"), "stream": ("sub_stream",)},
)

CHILD_ABILITY = FlowSpec(
    name="child_ability",
    steps=(
        StepSpec(
            key="info",
            title="Child details",
            fields=(
                FieldSpec("name", label="Child's name"),
                FieldSpec("age", label="Age"),
                FieldSpec("class_level", label="Class"),
            ),
            validator=_age_validator,
        ),
        StepSpec(
            key="choice",
            title="Choose a test",
            fields=(FieldSpec("test_type", kind="single", label="Test type", options=TEST_TYPES),),
        ),
        StepSpec(
            key="specific",
            title="Specific career path",
            fields=(
                FieldSpec("sector", kind="single", label="Sector", required_when="is_specific"),
                FieldSpec("job", kind="single", label="Job", required_when="is_specific", message="Please select a specific career path."),
                FieldSpec(
                    "specialization",
                    kind="single",
                    label="Specialization",
                    required_when="is_specific",
                    message="Please select a specific career path.",
                ),
            ),
            validator=_specific_path_validator,
        ),
    ),
    defaults={"test_type": "General"},
    branch_rules={"is_specific": lambda answers: answers.get("test_type") == "Specific"},
    cascades={"sector": ("job", "specialization"), "job": ("specialization",)},
)

TEACHER_TEST = FlowSpec(
    name="teacher_test",
    steps=(
        StepSpec(
            key="student",
            title="Create a new test",
            fields=(
                FieldSpec("name", label="Student name"),
                FieldSpec("class_level", label="Class"),
                FieldSpec("email", label="Student email"),
                FieldSpec("test_type", kind="single", label="Test type", options=TEST_TYPES),
                FieldSpec("sector", kind="single", label="Sector", required_when="is_specific"),
                FieldSpec("job", kind="single", label="Job", required_when="is_specific"),
                FieldSpec("specialization", kind="single", label="Specialization", required_when="is_specific"),
            ),
            validator=lambda answers, flags: (
                {"email": "Please enter a valid email."} if answers.get("email") and "@" not in str(answers["email"]) else {}
            ),
        ),
    ),
    defaults={"test_type": "General"},
    branch_rules={"is_specific": lambda answers: answers.get("test_type") == "Specific"},
    cascades={"test_type": ("sector", "job", "specialization"), "sector": ("job", "specialization"), "job": ("specialization",)},
)

SPORTS = FlowSpec(
    name="sports",
    steps=(
        StepSpec(
            key="search",
            title="Find sports academies",
            fields=(
                FieldSpec("state", kind="single", label="State"),
                FieldSpec("city", kind="single", label="City"),
                FieldSpec("sport", kind="single", label="Sport"),
                FieldSpec("age", label="Age"),
            ),
            validator=_age_validator,
        ),
    ),
    cascades={"state": ("city",)},
)

BUSINESS_IDEA = FlowSpec(
    name="business_idea",
    steps=(
        StepSpec(
            key="idea",
            title="Describe your business idea",
            fields=(
                FieldSpec("idea", label="Business idea"),
                FieldSpec("problem", label="Problem it solves"),
                FieldSpec("solution", label="Unique solution"),
            ),
        ),
    ),
)

FEE_STRUCTURE = FlowSpec(
    name="fee_structure",
    steps=(
        StepSpec(
            key="institution",
            title="Find a school or college",
            fields=(
                FieldSpec("institution_type", kind="single", label="Institution type", options=INSTITUTION_TYPES),
                FieldSpec("name", label="Institution name", message="Please enter the institution name."),
                FieldSpec("location", label="City or area", message="Please enter a city or area."),
            ),
        ),
    ),
    defaults={"institution_type": "School"},
)

NOTES_BROWSER = FlowSpec(
    name="notes",
    steps=(
        StepSpec(
            key="topic",
            title="Find notes",
            fields=(
                FieldSpec("class_id", kind="single", label="Class"),
                FieldSpec("stream_id", kind="single", label="Stream", required_when="requires_stream"),
                FieldSpec("subject_id", kind="single", label="Subject"),
                FieldSpec("chapter_id", kind="single", label="Chapter"),
                FieldSpec("topic_id", kind="single", label="Topic"),
            ),
        ),
    ),
    defaults={"class_name": ""},
    branch_rules={
        "requires_stream": lambda answers: str(answers.get("class_name") or "").strip().lower() in NOTES_STREAM_CLASSES
    },
    cascades={
        "class_id": ("stream_id", "subject_id", "chapter_id", "topic_id"),
        "stream_id": ("subject_id", "chapter_id", "topic_id"),
        "subject_id": ("chapter_id", "topic_id"),
        "chapter_id": ("topic_id",),
    },
)


def quiz_context(answers: Mapping[str, Any]) -> str:
    class_level = answers.get("class_level", "")
    context = f"The student is in {class_level}."
    if class_level in QUIZ_STREAM_LEVELS:
        sub_stream = answers.get("sub_stream")
        suffix = f" ({sub_stream})" if sub_stream else ""
        context += f" Their selected stream is {answers.get('stream', '')}{suffix}."
    else:
        context += " They are in the 1-10 class range."
    return context


def specific_career_label(answers: Mapping[str, Any], with_sector: bool = True) -> str | None:
    if answers.get("test_type") != "Specific":
        return None
    label = f"{answers.get('job', '')} ({answers.get('specialization', '')})"
    if with_sector:
        label += f" in {answers.get('sector', '')}"
    return label


def hierarchy_path(answers: Mapping[str, Any], flags: Mapping[str, bool], depth: str = "topic") -> str:
    """Build the catalogue path for the notes browser.

    The stream segment is present only when the class requires one.
    """
    levels = [("subjects", "subject_id"), ("chapters", "chapter_id"), ("topics", "topic_id")]
    parts = ["classes", str(answers.get("class_id", ""))]
    if flags.get("requires_stream") and answers.get("stream_id"):
        parts += ["streams", str(answers["stream_id"])]
    for collection, key in levels:
        value = answers.get(key)
        if not value:
            break
        parts += [collection, str(value)]
        if key == f"{depth}_id":
            break
    return "/".join(parts)
