"""Query-string paging helpers."""

from flask import current_app, request


def page_args():
    """(page, per_page) from ?page= and ?limit=, clamped to the configured bounds."""
    page = max(request.args.get('page', 1, type=int), 1)
    per_page = request.args.get('limit', current_app.config['ITEMS_PER_PAGE'], type=int)
    per_page = min(max(per_page, 1), current_app.config['MAX_ITEMS_PER_PAGE'])
    return page, per_page


def paginate(query):
    page, per_page = page_args()
    return query.paginate(page=page, per_page=per_page, error_out=False)


def page_payload(pagination, key):
    return {
        'success': True,
        key: [item.to_dict() for item in pagination.items],
        'pagination': {
            'page': pagination.page,
            'limit': pagination.per_page,
            'total': pagination.total,
            'pages': pagination.pages,
        },
    }
