"""chessmatch: match control for human and computer chess play."""
