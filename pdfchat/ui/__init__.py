"""NiceGUI interface - thin visualization layer for PDF chat.

Responsibilities:
    - Starting a chat thread when the page opens
    - Picking a PDF and uploading it before the next question
    - Displaying user and assistant turns with light markdown

Contains minimal business logic. Delegates all operations to the API.
"""
