"""Prompt templates for Gemini API calls."""

from models.schemas.match_result import MatchResult
from models.schemas.resume import ParsedProfile


def build_appropriateness_prompt(profile: ParsedProfile, candidates: list[MatchResult]) -> str:
    """Ask the reasoning service to KEEP or FILTER_OUT each candidate job.

    Candidates are referenced by their position in `candidates`.
    """
    years = f"{profile.years_of_experience:g}" if profile.years_of_experience else "Unknown"
    recent_role = profile.recent_title or profile.primary_role or "Not specified"
    recent_company = profile.recent_company or "Not specified"

    job_lines = "\n".join(
        f"ID {i}: {m.job.title} at {m.job.company} ({m.job.experience_level.value}) "
        f"- Industry: {m.job.industry} - Location: {m.job.location or 'Unspecified'} "
        f"- Skills: {', '.join(m.job.skills[:5])} "
        f"- Current Match: {m.match_score:.0%} ({m.confidence.value} confidence)"
        for i, m in enumerate(candidates)
    )

    return f"""You are an expert career counselor. Decide whether each job opportunity is an appropriate match for this candidate.

CANDIDATE PROFILE:
- Name: {profile.name or 'Candidate'}
- Years of Experience: {years}
- Current Level: {profile.experience_level.value}
- Primary Role: {profile.primary_role or 'Not specified'}
- Industries: {', '.join(profile.industries) or 'Not specified'}
- Key Skills: {', '.join(profile.skills[:10]) or 'Not specified'}
- Most Recent Role: {recent_role} at {recent_company}

JOB OPPORTUNITIES TO ANALYZE:
{job_lines}

FILTERING CRITERIA (follow strictly):
1. Experience level: filter out roles far above the candidate's level (e.g. VP roles
   for a mid-level engineer) or far below it (e.g. internships for a senior engineer).
   Reasonable progression of one or two levels up is fine.
2. Title relevance: the title should align with the candidate's background. Flag roles
   in a completely unrelated domain.
3. Skill alignment: filter out major skill mismatches; credit transferable skills.

Be practical, not overly restrictive. Show relevant opportunities and remove only
obviously inappropriate ones.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "analysis": [
    {{
      "jobId": <integer ID from the list above>,
      "decision": "KEEP" | "FILTER_OUT",
      "reason": "<brief explanation>",
      "confidenceAdjustment": "INCREASE" | "DECREASE" | null
    }}
  ],
  "summary": "<overall assessment of the candidate's job market fit>"
}}"""
