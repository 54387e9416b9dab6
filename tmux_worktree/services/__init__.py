"""Services: reconciliation stages and the tmux / git / filesystem adapters."""
