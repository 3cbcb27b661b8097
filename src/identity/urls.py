USERS_URL = "/api/private/users"
USER_URL = "/api/private/users/{user_id}"
