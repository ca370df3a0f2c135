"""Application logging (labeled stdout logger) and the JSON Lines error log."""
