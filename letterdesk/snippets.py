from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from slugify import slugify


@dataclass(frozen=True)
class Snippet:
    label: str
    template: str

    @property
    def key(self) -> str:
        return slugify(self.label)

    def render(self, today: Optional[date] = None) -> str:
        return self.template.format(date=long_date(today or date.today()))


def long_date(day: date) -> str:
    return f"{day.strftime('%B')} {day.day}, {day.year}"


SNIPPETS: List[Snippet] = [
    Snippet(
        label="Prior Authorization",
        template=(
            "Date: {date}\n\n"
            "To Whom It May Concern,\n\n"
            "We are writing to request prior authorization for [PATIENT NAME], Date of Birth: [DOB], "
            "for the following treatment: [TREATMENT/MEDICATION].\n\n"
            "The patient has been evaluated and it is our clinical determination that this treatment "
            "is medically necessary due to [CLINICAL REASON].\n\n"
            "Please find attached supporting clinical documentation. We respectfully request expedited "
            "review given the medical urgency of this case.\n\n"
            "Thank you for your prompt attention to this matter. Please do not hesitate to contact our "
            "office at support@fountain.net with any questions.\n\n"
            "Sincerely,"
        ),
    ),
    Snippet(
        label="Medical Necessity",
        template=(
            "Date: {date}\n\n"
            "To Whom It May Concern,\n\n"
            "This letter serves to document the medical necessity of [TREATMENT/MEDICATION] for our "
            "patient, [PATIENT NAME], Date of Birth: [DOB].\n\n"
            "[PATIENT NAME] has been under our care since [DATE] and presents with "
            "[DIAGNOSIS/CONDITION]. After thorough clinical evaluation, we have determined that "
            "[TREATMENT/MEDICATION] is medically necessary for the following reasons:\n\n"
            "1. [CLINICAL REASON 1]\n"
            "2. [CLINICAL REASON 2]\n"
            "3. [CLINICAL REASON 3]\n\n"
            "Alternative treatments including [ALTERNATIVES] have been considered and deemed "
            "insufficient due to [REASON].\n\n"
            "It is our professional medical opinion that proceeding with this treatment is in the best "
            "interest of the patient's health and well-being.\n\n"
            "Sincerely,"
        ),
    ),
    Snippet(
        label="Prescription Letter",
        template=(
            "Date: {date}\n\n"
            "To Whom It May Concern,\n\n"
            "This letter confirms that [PATIENT NAME], Date of Birth: [DOB], is currently under the "
            "care of Fountain Health and has been prescribed the following:\n\n"
            "Medication: [MEDICATION NAME]\n"
            "Dosage: [DOSAGE]\n"
            "Frequency: [FREQUENCY]\n"
            "Duration: [DURATION]\n\n"
            "This prescription has been issued following a thorough clinical evaluation and is "
            "medically indicated for the treatment of [CONDITION].\n\n"
            "If you have any questions regarding this prescription, please contact our office at "
            "support@fountain.net or (213) 237-1454.\n\n"
            "Sincerely,"
        ),
    ),
]

SNIPPETS_BY_KEY: Dict[str, Snippet] = {snippet.key: snippet for snippet in SNIPPETS}


def get_snippet(key: str) -> Snippet:
    try:
        return SNIPPETS_BY_KEY[slugify(key)]
    except KeyError:
        raise KeyError(f"Unknown snippet: {key}") from None
