"""External collaborators: uploads and notifications."""
