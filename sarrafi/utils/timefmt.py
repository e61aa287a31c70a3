from datetime import datetime


def format_time_ago(moment, now=None):
    """Short Persian "N units ago" text for activity feeds."""
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment)
    now = now or datetime.utcnow()
    seconds = (now - moment).total_seconds()

    for length, unit in ((31536000, 'سال'), (2592000, 'ماه'), (86400, 'روز'),
                         (3600, 'ساعت'), (60, 'دقیقه')):
        interval = seconds / length
        if interval > 1:
            return f'{int(interval)} {unit} پیش'
    return 'همین الان'
