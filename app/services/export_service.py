"""
Excel exports of the guest list and RSVPs
"""

import io
from typing import Any, Dict, List

import pandas as pd

from app.services.event_service import EventService


class ExportService:
    """Service for spreadsheet exports"""

    @staticmethod
    def _to_xlsx(rows: List[Dict[str, Any]], columns: List[str], sheet_name: str) -> bytes:
        df = pd.DataFrame(rows, columns=columns)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name)

        return buffer.getvalue()

    @staticmethod
    def export_guests_xlsx(guests: List[Dict[str, Any]], events: List[Dict[str, Any]]) -> bytes:
        """Export the guest list to Excel"""
        data = []
        for guest in guests:
            data.append({
                'Name': guest.get('name'),
                'Email': guest.get('email') or '',
                'Phone': guest.get('phone') or '',
                'Events': EventService.event_names(guest.get('events_invited_to'), events),
                'Email Consent': 'Yes' if guest.get('email_consent') else 'No'
            })
        return ExportService._to_xlsx(
            data,
            ['Name', 'Email', 'Phone', 'Events', 'Email Consent'],
            'Guest List'
        )

    @staticmethod
    def export_rsvps_xlsx(rsvps: List[Dict[str, Any]], events: List[Dict[str, Any]]) -> bytes:
        """Export RSVPs to Excel"""
        event_names = {e['id']: e.get('name') for e in events}

        data = []
        for rsvp in rsvps:
            event_id = rsvp.get('event_id')
            data.append({
                'Guest': rsvp.get('guest_name'),
                'Email': rsvp.get('guest_email') or '',
                'Phone': rsvp.get('phone_number') or '',
                'Event': (event_names.get(event_id) or 'Unknown') if event_id else 'Entire Wedding',
                'Status': rsvp.get('status'),
                'Plus One': 'Yes' if rsvp.get('plus_one') else 'No',
                'Message': rsvp.get('message') or '',
                'Submitted At': rsvp.get('submitted_at') or ''
            })
        return ExportService._to_xlsx(
            data,
            ['Guest', 'Email', 'Phone', 'Event', 'Status', 'Plus One', 'Message', 'Submitted At'],
            'RSVPs'
        )
