# app/services/email_service.py
import html
import logging
from datetime import date
from typing import Optional, Dict, Any

import resend
from flask import Flask

from app.utils.datetime_utils import DateTimeUtils


class EmailDeliveryError(RuntimeError):
    """확인 메일 발송 실패"""


class EmailService:
    """
    Resend API를 통한 예약 확인 메일 발송 서비스.
    실패 시 재시도하지 않고 EmailDeliveryError를 호출 측에 전달합니다.
    """

    def __init__(self):
        self.api_key: Optional[str] = None
        self.from_address = "PetCare Clinic <onboarding@resend.dev>"
        self.clinic_name = "PetCare Clinic"

    def init_app(self, app: Flask):
        """Flask 앱 설정에서 Resend API 키와 발신자 정보를 읽어옵니다."""
        self.api_key = app.config.get('RESEND_API_KEY')
        self.from_address = app.config.get('EMAIL_FROM_ADDRESS') or self.from_address
        self.clinic_name = app.config.get('CLINIC_NAME') or self.clinic_name
        if self.api_key:
            resend.api_key = self.api_key
            logging.info("EmailService: Resend 메일 서비스가 초기화되었습니다.")
        else:
            logging.warning("EmailService: RESEND_API_KEY가 없어 확인 메일이 발송되지 않습니다.")

    def send_appointment_confirmation(self, owner_name: str, email: str, pet_name: str, service: str,
                                      appointment_date: date, time_slot: str,
                                      diagnosis: Optional[str] = None) -> Dict[str, Any]:
        """예약 확인 메일을 발송하고 Resend 응답을 반환합니다."""
        if not self.api_key:
            raise EmailDeliveryError("메일 서비스가 설정되지 않았습니다 (RESEND_API_KEY).")

        params = {
            "from": self.from_address,
            "to": [email],
            "subject": f"Appointment Confirmation - {pet_name}",
            "html": self.render_confirmation(owner_name, pet_name, service, appointment_date, time_slot, diagnosis),
        }
        try:
            response = resend.Emails.send(params)
            logging.info(f"Appointment confirmation sent to {email}: {response}")
            return response
        except Exception as e:
            logging.error(f"Appointment confirmation send failed ({email}): {e}", exc_info=True)
            raise EmailDeliveryError(f"확인 메일 발송에 실패했습니다: {e}") from e

    def render_confirmation(self, owner_name: str, pet_name: str, service: str, appointment_date: date,
                            time_slot: str, diagnosis: Optional[str] = None) -> str:
        """확인 메일 HTML 본문. 사용자 입력은 모두 escape 처리합니다."""
        e = html.escape
        details = [
            ("Pet Name", pet_name),
            ("Service", service),
            ("Date", DateTimeUtils.to_long_date_string(appointment_date)),
            ("Time", time_slot),
            ("Owner", owner_name),
        ]
        if diagnosis:
            details.append(("Reason for Visit", diagnosis))
        rows = "\n".join(
            f'<div class="detail-row"><span class="label">{e(label)}:</span> '
            f'<span class="value">{e(value)}</span></div>'
            for label, value in details
        )
        clinic = e(self.clinic_name)
        return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Appointment Confirmation</title></head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <h1>Appointment Confirmed!</h1>
    <p>Dear <strong>{e(owner_name)}</strong>,</p>
    <p>Thank you for booking an appointment with {clinic}. We're excited to take care of <strong>{e(pet_name)}</strong>!</p>
    <div class="appointment-details">
      <h3>Appointment Details</h3>
      {rows}
    </div>
    <h4>Important Reminders:</h4>
    <ul>
      <li>Please arrive 10 minutes early for check-in</li>
      <li>Bring any previous medical records or medications</li>
      <li>If you need to reschedule, please call us at least 24 hours in advance</li>
      <li>Ensure your pet is secure in a carrier or on a leash</li>
    </ul>
    <p>We look forward to seeing you and {e(pet_name)} soon!</p>
    <p>Best regards,<br><strong>The {clinic} Team</strong></p>
    <p style="font-size: 12px;">This is an automated message. Please do not reply to this email.</p>
  </body>
</html>"""
