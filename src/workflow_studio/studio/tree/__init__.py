"""Tree edits and path indexing over the step tree."""
