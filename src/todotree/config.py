"""Default configuration settings for the todotree tool."""

DEFAULT_CONFIG = {
	# Scan configuration
	"scan": {
		# Candidate selection: 'tree' (whole working tree) or 'diff' (files changed vs base_branch)
		"mode": "tree",
		# Reference used by diff mode; any revision git understands
		"base_branch": "main",
		# Extra gitwildmatch patterns to skip on top of the repository's ignore rules
		"exclude_patterns": [],
		# Number of leading bytes inspected by the binary-file check
		"binary_check_bytes": 1024,
	},
	# Report configuration
	"report": {
		# Order of commit groups: oldest first unless set
		"newest_first": False,
		# Width of the abbreviated commit id in group labels
		"short_id_length": 7,
		# Rich style applied to the TODO marker in each reported line
		"highlight_style": "bold red",
	},
}
