"""Small request helpers shared by the JSON views."""
import json


def request_data(request) -> dict:
    """JSON body when the client sent JSON, form data otherwise. Bad JSON reads as empty."""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    return request.POST.dict()


def client_ip(request) -> str:
    """Caller IP, honouring the first X-Forwarded-For hop set by the proxy."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')
