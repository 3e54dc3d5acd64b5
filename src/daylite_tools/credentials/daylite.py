"""
Daylite tool credentials.

CalDAV tools (appointments, tasks) need a username and password; REST tools
(contacts, companies, opportunities, projects, search) need a personal
refresh token.
"""

from .base import CredentialSpec

CALDAV_TOOLS = [
    "daylite_list_calendars",
    "daylite_refresh_calendars",
    "daylite_list_appointments",
    "daylite_get_appointment",
    "daylite_create_appointment",
    "daylite_update_appointment",
    "daylite_delete_appointment",
    "daylite_list_tasks",
    "daylite_get_task",
    "daylite_create_task",
    "daylite_update_task",
    "daylite_delete_task",
]

REST_TOOLS = [
    "daylite_list_contacts",
    "daylite_get_contact",
    "daylite_create_contact",
    "daylite_update_contact",
    "daylite_delete_contact",
    "daylite_list_companies",
    "daylite_get_company",
    "daylite_create_company",
    "daylite_update_company",
    "daylite_delete_company",
    "daylite_list_opportunities",
    "daylite_get_opportunity",
    "daylite_create_opportunity",
    "daylite_update_opportunity",
    "daylite_delete_opportunity",
    "daylite_list_projects",
    "daylite_get_project",
    "daylite_create_project",
    "daylite_update_project",
    "daylite_delete_project",
    "daylite_search",
    "daylite_list_pipelines",
    "daylite_debug_raw",
]

_CALDAV_INSTRUCTIONS = """To use the Daylite CalDAV tools:
1. Use the same username and password you sign in to Daylite with
2. Set DAYLITE_USERNAME and DAYLITE_PASSWORD
3. Optionally set DAYLITE_SERVER_URL for a self-hosted CalDAV endpoint"""

DAYLITE_CREDENTIALS = {
    "daylite_username": CredentialSpec(
        env_var="DAYLITE_USERNAME",
        tools=CALDAV_TOOLS,
        description="Daylite account name for CalDAV (appointments and tasks)",
        instructions=_CALDAV_INSTRUCTIONS,
    ),
    "daylite_password": CredentialSpec(
        env_var="DAYLITE_PASSWORD",
        tools=CALDAV_TOOLS,
        description="Daylite account password for CalDAV",
        instructions=_CALDAV_INSTRUCTIONS,
    ),
    "daylite_refresh_token": CredentialSpec(
        env_var="DAYLITE_REFRESH_TOKEN",
        tools=REST_TOOLS,
        description="Daylite personal refresh token for the REST API",
        instructions="""To get a Daylite personal token:
1. Open https://developer.daylite.app/reference/personal-token
2. Sign in with your Daylite account and generate a personal token
3. Copy the refresh token and set DAYLITE_REFRESH_TOKEN
4. The server rotates the token and keeps the latest one in ~/.daylite-refresh-token""",
    ),
}
