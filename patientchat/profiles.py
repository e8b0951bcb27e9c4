from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class PatientProfile:
    key: str
    name: str
    image: str
    demographics: Tuple[Tuple[str, str], ...]
    personality: Tuple[str, ...]
    medical: Tuple[str, ...]
    past: Tuple[str, ...]
    challenges: Tuple[str, ...]
    example: str
    default_response: str

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]

    def sections(self) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
        return (
            ("Personality & Communication Style", self.personality),
            ("Medical Background", self.medical),
            ("Past Interactions with Doctor", self.past),
            ("Challenges & Concerns", self.challenges),
        )


SARAH = PatientProfile(
    key="sarah",
    name="Sarah Martinez",
    image="https://randomuser.me/api/portraits/women/44.jpg",
    demographics=(
        ("Age", "45"),
        ("Gender", "Female"),
        ("Location", "Austin, Texas, USA"),
        ("Occupation", "Elementary school teacher"),
        ("Family", "Divorced, primary caregiver to two children (ages 12 and 15) and elderly mother"),
    ),
    personality=(
        "Anxious, underconfident, but principled",
        "Feels overwhelmed by responsibilities",
        "Prefers empathetic, reassuring, and slower-paced conversations",
        "Appreciates when information is broken down into simple terms",
        "Needs emotional support and encouragement to ask follow-up questions",
    ),
    medical=(
        "Diagnosed with Stage I breast cancer 9 months ago",
        "Underwent lumpectomy and radiation therapy",
        "Currently on hormone therapy, dealing with side effects like fatigue and mood swings",
    ),
    past=(
        "Hesitant to ask too many questions for fear of 'bothering' the doctor",
        "Needs reassurance that she is making the right treatment decisions",
    ),
    challenges=(
        "Worries about how her illness affects her children emotionally",
        "Financial stress due to missed work and medical bills",
    ),
    example=(
        "Doctor, I've been feeling so tired lately, and I'm worried it's a sign the cancer might be "
        "coming back. Could it just be the medication? And... how can I explain all this to my kids "
        "without scaring them?"
    ),
    default_response="I'm here for you, Sarah. Could you tell me a bit more about what's on your mind?",
)


MICHAEL = PatientProfile(
    key="michael",
    name="Michael Thompson",
    image="https://randomuser.me/api/portraits/men/32.jpg",
    demographics=(
        ("Age", "52"),
        ("Gender", "Male"),
        ("Location", "Boston, Massachusetts, USA"),
        ("Occupation", "Senior Financial Analyst at a major investment bank"),
        ("Family", "Married with two adult children"),
    ),
    personality=(
        "Reassured, confident, objective, practical",
        "Highly data-driven and analytical",
        "Prefers structured conversations and evidence-based explanations",
        "Values efficiency and directness in communication",
    ),
    medical=(
        "Diagnosed with Stage II colorectal cancer 18 months ago",
        "Underwent surgery and chemotherapy",
        "Currently in remission but on quarterly follow-up",
    ),
    past=(
        "Always arrives prepared with spreadsheets of lab results and medical history",
        "Asks for clinical trial data and statistical outcomes",
    ),
    challenges=(
        "Balances demanding work schedule with medical appointments",
        "Concerned about long-term recurrence risk",
    ),
    example=(
        "Doctor, based on the last CEA trend and your experience, what's the statistical likelihood "
        "of recurrence in my case over the next five years? Could you also share any peer-reviewed "
        "studies supporting lifestyle interventions for reducing that risk?"
    ),
    default_response=(
        "Michael, I can look that up or summarize the latest data if you'd like. "
        "Could you clarify your question?"
    ),
)


# panel id -> profile; left/right order is display order
PROFILES: Dict[str, PatientProfile] = {"left": SARAH, "right": MICHAEL}
