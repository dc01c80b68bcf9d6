"""Capture processing domain.

Turns a raw capture (clipped article, conversation transcript, note) into a
markdown note in the owner's vault: render a prompt, ask the generator, recover
title/summary/key points/tags from its free text, render markdown and write it
without ever overwriting an existing file.
"""
