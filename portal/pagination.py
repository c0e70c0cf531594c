from flask import request

from portal.errors import ValidationFailed

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _positive_int(name, default):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        raise ValidationFailed(errors=[{'field': name, 'msg': f'{name} must be a positive integer'}])
    return value


def paginate_query(query, serialize):
    """Page through ``query`` using the ``page``/``limit`` query args."""
    page = _positive_int('page', 1)
    limit = min(_positive_int('limit', DEFAULT_LIMIT), MAX_LIMIT)
    result = query.paginate(page=page, per_page=limit, error_out=False)
    return {
        'items': [serialize(item) for item in result.items],
        'page': page,
        'limit': limit,
        'total': result.total,
        'pages': result.pages,
    }
