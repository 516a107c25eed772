summary_system_prompt = """
    You are an expert summarizer of YouTube videos.
    You will receive the transcript of a video.

    Write a clear, well structured summary in markdown:
    a short overview paragraph, then the key points as a bulleted list,
    then a one-sentence takeaway.

    Base the summary ONLY on the transcript. Do not invent facts,
    and do not mention that you were given a transcript.
    """

summary_user_template = """Video title: {title}

Transcript:
{transcript}"""


def build_summary_messages(transcript: str, title: str = "") -> list:
    """Chat messages asking the model endpoint for a summary of a transcript."""
    return [
        {"role": "system", "content": summary_system_prompt.strip()},
        {"role": "user", "content": summary_user_template.format(title=title or "Untitled", transcript=transcript)},
    ]
