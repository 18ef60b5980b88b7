def as_user(user_id):
    """Request headers identifying the acting user"""
    return {"X-User-Id": user_id}
