from __future__ import annotations  # Prompt builders for question and feedback generation

from textwrap import dedent

from interview_session.models import InterviewQuestion, JobContext, SessionConfig


def questions_system_prompt(count: int) -> str:  # Instructions fixing the question payload shape
    return dedent(
        f"""
        You are an expert interview coach. Generate {count} relevant interview questions based on the job description and candidate's resume.

        Return ONLY a JSON array of questions in this exact format:
        [
          {{
            "id": "unique_id",
            "question": "question text",
            "category": "category name",
            "difficulty": "easy|medium|hard",
            "suggested_answer_length": number_in_seconds
          }}
        ]

        Categories should be one of: Technical, Behavioral, Experience, Problem-Solving, Company-Specific
        Difficulty should be based on the seniority level implied by the job title
        Suggested answer length should be between 60-180 seconds
        """
    ).strip()


_QUESTIONS_TASK = dedent(
    """
    Job Title: {job_title}
    Company: {company}
    Job Description: {job_description}

    Candidate Resume: {resume_text}

    Generate {count} interview questions tailored to this specific role and candidate background.
    """
).strip()


def questions_task(config: SessionConfig, count: int) -> str:  # User turn carrying the role and resume
    return _QUESTIONS_TASK.format(
        job_title=config.job_title,
        company=config.company,
        job_description=config.job_description,
        resume_text=config.resume_text,
        count=count,
    )


FEEDBACK_SYSTEM_PROMPT = dedent(
    """
    You are an expert interview coach providing detailed feedback on interview responses.

    Analyze the candidate's response and provide feedback in this EXACT JSON format:
    {
      "content_score": number (1-10),
      "communication_score": number (1-10),
      "confidence_score": number (1-10),
      "detailed_feedback": "detailed analysis string",
      "strengths": ["strength1", "strength2", "strength3"],
      "improvements": ["improvement1", "improvement2", "improvement3"]
    }

    Scoring criteria:
    - Content Score: Relevance, completeness, accuracy of the answer
    - Communication Score: Clarity, structure, articulation
    - Confidence Score: Poise, conviction, professional demeanor

    Provide constructive, specific feedback that helps the candidate improve.
    """
).strip()


_FEEDBACK_TASK = dedent(
    """
    Job Context:
    Title: {job_title}
    Company: {company}
    Description: {job_description}

    Interview Question: {question}

    Candidate's Response: {transcript}

    Response Duration: {duration_seconds} seconds

    Please analyze this response and provide detailed feedback with scores and actionable insights.
    """
).strip()


def feedback_task(question: InterviewQuestion, transcript: str, duration_seconds: float, job: JobContext) -> str:  # User turn for one answer
    return _FEEDBACK_TASK.format(
        job_title=job.job_title,
        company=job.company,
        job_description=job.job_description,
        question=question.text,
        transcript=transcript,
        duration_seconds=duration_seconds,
    )


__all__ = ["FEEDBACK_SYSTEM_PROMPT", "feedback_task", "questions_system_prompt", "questions_task"]
