"""Meetings and everything a meeting owns.

Participants, agent assignments, transcripts, the summary, and the
recording all hang off a meeting row and are deleted with it. Access is
always checked against the meeting's owner first.
"""
