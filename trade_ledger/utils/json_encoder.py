import json
from datetime import datetime
from decimal import Decimal

class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder for datetimes and Decimal quantities"""

    def default(self, o):
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Decimal):
            # Plain-notation text: a float would drop digits past ~17
            return format(o, 'f')
        return super().default(o)
