"""Terminal RSS reader, runnable locally or served over SSH."""
