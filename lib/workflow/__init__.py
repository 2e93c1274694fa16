"""
Workflow package for the ImageTool application.

Controllers that own the selection, stitch and crop state, the image
repository and the media store boundary live in ``workflow.services``.
"""
