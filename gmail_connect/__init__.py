"""Company signup service granting Gmail access through Google OAuth."""
