from __future__ import annotations

from curricula.domain.dto import ChatMessage, LLMClientRequest
from curricula.domain.job_requirements import EvaluationCriterion, JobRequirements

STANDARD_SECTIONS: tuple[str, ...] = (
    "Personal Information",
    "Academic Education",
    "Professional Experience",
    "Skills",
    "Additional Information",
)

REPORT_SECTIONS: tuple[str, ...] = (
    "Strengths",
    "Concerns",
    "Overall Fit",
    "Score",
    "Sentiment",
    "Incomplete Info",
)

SECTION_MARKER = "##"

STANDARDIZE_SYSTEM_TEMPLATE = (
    "You are a CV standardization expert. Convert the provided CV text into a consistent "
    "Markdown document with exactly these sections, in this order:\n"
    "{sections}\n\n"
    "Follow these rules strictly:\n"
    "- Introduce every section with a level 2 header ({marker}) using the exact section name\n"
    "- List education and experience entries in chronological order\n"
    "- Use bullet points for skills and responsibilities\n"
    "- Keep all original information, only reorganize it into the standard format\n"
    "- Keep formatting consistent across all CVs"
)

ANALYSIS_OUTPUT_CONTRACT = (
    "Output your response ONLY as a valid JSON object with the following structure:\n"
    "{{\n"
    '  "report": "[Detailed Markdown analysis with these section names: {report_sections}]",\n'
    '  "csvData": {{\n'
    '    "score": [numerical score between 0-100],\n'
    '    "sentiment": [short sentiment analysis],\n'
    '    "name": [candidate name],\n'
    '    "email": [candidate email],\n'
    '    "incomplete_info": [incomplete or ambiguous information],\n'
    '    "education": [highest education level],\n'
    '    "key_skills": [comma-separated list of top 5 skills]\n'
    "  }}\n"
    "}}\n\n"
    "IMPORTANT: Return ONLY valid JSON without any text before or after it. "
    "Do not wrap it in code fences. The complete response must be parseable as JSON."
)

ANALYSIS_ROLE = (
    "You are an expert HR recruiter with deep technical knowledge. Analyze the CV considering:\n"
    "1. Technical expertise and its alignment with our needs\n"
    "2. Quality and relevance of professional experience\n"
    "3. Cultural fit indicators\n"
    "4. Educational background\n"
    "5. Evidence of soft skills\n\n"
    "Provide a structured analysis including:\n"
    "- Key strengths\n"
    "- Potential areas of concern\n"
    "- Overall fit for the position\n"
    "- Numerical score (0-100)\n"
    "- Sentiment analysis of the fit (short text)\n"
    "- Incomplete or ambiguous information (identify every criterion that could not be "
    "evaluated because the CV is missing, vague or contradictory about it)"
)

SCORING_RULES = (
    "Calculate the final score (0-100) considering the weight of each criterion. The score "
    "should be objective but may carry a subjective component reflecting your overall "
    "opinion of the CV. For each criterion, assign a score from 0 to 100 and multiply it by "
    "its weight. The sum of these weighted values is the candidate's final score."
)


def humanize_criterion_name(name: str) -> str:
    label = name.replace("_", " ").strip()
    return label[:1].upper() + label[1:]


def render_criterion(criterion: EvaluationCriterion) -> str:
    return f"{humanize_criterion_name(criterion.name)} (weight: {criterion.weight:.2f}): {criterion.description}"


def render_evaluation_criteria(requirements: JobRequirements) -> str:
    lines = [
        f"Evaluate the candidate in {requirements.output_language} language "
        "using the following specific criteria:",
        "",
    ]
    lines.extend(render_criterion(item) for item in requirements.evaluation_criteria)
    lines.extend(["", SCORING_RULES])
    return "\n".join(lines)


def build_standardize_request(*, raw_text: str, output_language: str) -> LLMClientRequest:
    system_prompt = STANDARDIZE_SYSTEM_TEMPLATE.format(
        sections="\n".join(STANDARD_SECTIONS),
        marker=SECTION_MARKER,
    )
    user_message = (
        "Please standardize this CV text in Markdown format. Use the exact section names "
        f"provided. Output in {output_language} language:\n\n{raw_text}"
    )
    return LLMClientRequest(
        system_prompt=system_prompt,
        messages=(ChatMessage(role="user", content=user_message),),
        purpose="standardize",
    )


def build_analysis_request(*, canonical_text: str, requirements: JobRequirements) -> LLMClientRequest:
    system_prompt = "\n\n".join(
        (
            ANALYSIS_OUTPUT_CONTRACT.format(report_sections=", ".join(REPORT_SECTIONS)),
            ANALYSIS_ROLE,
            render_evaluation_criteria(requirements),
        )
    )
    user_message = (
        f"Job Description:\n{requirements.job_description}\n\n"
        f"Position: {requirements.position}\n\n"
        f"Candidate CV:\n{canonical_text}\n\n"
        f"Output the analysis in {requirements.output_language} language and in valid JSON format."
    )
    return LLMClientRequest(
        system_prompt=system_prompt,
        messages=(ChatMessage(role="user", content=user_message),),
        purpose="analyze",
    )
