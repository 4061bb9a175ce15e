from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class Term:
    """One registration cycle, e.g. Term('2024/2025', '1st Semester')."""
    academic_year: str
    semester: str

    def __str__(self):
        return f"{self.semester} {self.academic_year}"

    def as_filter(self, prefix=''):
        return {
            f'{prefix}academic_year': self.academic_year,
            f'{prefix}semester': self.semester,
        }


def configured_term() -> Term:
    """Term named in settings.ACADEMICS; only the HTTP layer falls back to it."""
    conf = settings.ACADEMICS
    return Term(conf['CURRENT_ACADEMIC_YEAR'], conf['CURRENT_SEMESTER'])


def term_from_params(params) -> Term:
    default = configured_term()
    academic_year = (params.get('academic_year') or '').strip() or default.academic_year
    semester = (params.get('semester') or '').strip() or default.semester
    return Term(academic_year, semester)
