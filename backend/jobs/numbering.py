"""Job numbers: AAL-<type abbreviation>-<YY>-<NNN>"""
from backend.core.numbering import year_suffix, next_number

JOB_TYPE_ABBREVIATIONS = {
    'AIR_FREIGHT_IMPORT': 'AI',
    'AIR_FREIGHT_EXPORT': 'AE',
    'SEA_FREIGHT_IMPORT': 'SI',
    'SEA_FREIGHT_EXPORT': 'SE',
    'ROAD_FREIGHT_IMPORT': 'RI',
    'ROAD_FREIGHT_EXPORT': 'RE',
}

JOB_NUMBER_WIDTH = 3


def job_number_prefix(job_type, today=None):
    abbreviation = JOB_TYPE_ABBREVIATIONS.get(job_type)
    if not abbreviation:
        raise ValueError(f"Invalid job type: {job_type}")
    return f"AAL-{abbreviation}-{year_suffix(today)}-"


def generate_job_number(job_type, offset=0, today=None):
    """Next free job number for ``job_type``; ``offset`` skips ahead on retries"""
    from .models import LogisticsJob

    prefix = job_number_prefix(job_type, today)
    return next_number(LogisticsJob.objects.all(), 'job_number', prefix, JOB_NUMBER_WIDTH, offset=offset)
