from decimal import Decimal
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import os
from typing import Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
from thrifthub.configuration.settings import Configuration
from thrifthub.helpers.order.formatters import format_currency, format_ghana_date
from fastapi import BackgroundTasks

configuration = Configuration()


class EmailService:
    def __init__(self):
        self.email_user = configuration.email_user
        self.email_password = configuration.email_password
        self.enabled = configuration.email_enabled
        self.template_env = Environment(
            loader=FileSystemLoader(os.path.join(os.path.dirname(__file__), 'templates')),
            autoescape=select_autoescape(['html']),
        )

    def send_email(self, to_email: str, subject: str, html_content: str, background_tasks: Optional[BackgroundTasks] = None):
        def send_email_task():
            if not self.enabled:
                logging.info(f"EMAIL >>> Delivery disabled, skipping '{subject}' to {to_email}")
                return
            try:
                msg = MIMEMultipart()
                msg['From'] = self.email_user
                msg['To'] = to_email
                msg['Subject'] = subject

                msg.attach(MIMEText(html_content, 'html'))

                with smtplib.SMTP(configuration.smtp_host, configuration.smtp_port) as server:
                    server.starttls()
                    server.login(self.email_user, self.email_password)
                    server.sendmail(self.email_user, to_email, msg.as_string())

                logging.info(f"EMAIL >>> Sent '{subject}' to {to_email}")
            except (smtplib.SMTPException, OSError) as e:
                logging.error(f"EMAIL >>> Could not send '{subject}' to {to_email}: {e}")

        if background_tasks:
            background_tasks.add_task(send_email_task)
        else:
            send_email_task()

    def render_template(self, template_name: str, **kwargs):
        template = self.template_env.get_template(template_name)
        return template.render(**kwargs)

    def send_payment_confirmation_email(self, email: str, order_number: str, amount: Decimal, is_full_payment: bool, background_tasks: Optional[BackgroundTasks] = None):
        subject = "Payment Confirmed - ThriftHub" if is_full_payment else "First Installment Received - ThriftHub"
        html_content = self.render_template(
            'payment_confirmation.html',
            order_number=order_number,
            amount=format_currency(amount),
            is_full_payment=is_full_payment,
        )
        self.send_email(email, subject, html_content, background_tasks)

    def send_payday_reminder_email(self, email: str, order_number: str, amount: Decimal, payday_date: date, days_until: int, background_tasks: Optional[BackgroundTasks] = None):
        subject = f"Payday Reminder: {days_until} days until auto-charge - ThriftHub"
        html_content = self.render_template(
            'payment_reminder.html',
            order_number=order_number,
            amount=format_currency(amount),
            payday_date=format_ghana_date(payday_date),
            days_until=days_until,
        )
        self.send_email(email, subject, html_content, background_tasks)

    def send_payment_failure_email(self, email: str, order_number: str, amount: Decimal, reason: str, background_tasks: Optional[BackgroundTasks] = None):
        subject = "Payment Failed - Action Required - ThriftHub"
        html_content = self.render_template(
            'payment_failure.html',
            order_number=order_number,
            amount=format_currency(amount),
            reason=reason,
        )
        self.send_email(email, subject, html_content, background_tasks)
