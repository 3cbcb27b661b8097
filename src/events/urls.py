PUBLIC_EVENT_URL = "/api/public/event/{event_id}"

ACTIVE_EVENTS_URL = "/api/private/events"
ARCHIVED_EVENTS_URL = "/api/private/archivedevents"
SIGNED_UP_EVENTS_URL = "/api/private/signedupevents"
USER_SIGNED_UP_EVENTS_URL = "/api/private/users/{user_id}/signedupevents"

EVENTS_URL = "/api/private/event"
EVENT_URL = "/api/private/event/{event_id}"

SIGN_UP_URL = "/api/private/event/signup"
SIGN_UP_GUEST_URL = "/api/private/event/signupguest"
SIGN_OUT_URL = "/api/private/event/signout"
CHANGE_COSTUME_URL = "/api/private/event/change-costume"

NOTIFY_MEMBERS_URL = "/api/private/email"
