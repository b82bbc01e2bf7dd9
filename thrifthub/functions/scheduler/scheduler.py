# thrifthub/functions/scheduler/scheduler.py
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from thrifthub.configuration.settings import Configuration
from thrifthub.functions.payment.payday_flex_jobs import charge_due_installments, send_payday_reminders

configuration = Configuration()


def start_scheduler():
    if not configuration.scheduler_enabled:
        logging.info("SYSTEM >>> Scheduler disabled")
        return None

    scheduler = BackgroundScheduler(timezone="UTC")

    # Second Payday Flex installments, every day at 06:00 UTC
    scheduler.add_job(charge_due_installments, "cron", hour=6, minute=0, id="charge_due_installments")

    # Reminder three days before payday, every day at 08:00 UTC
    scheduler.add_job(send_payday_reminders, "cron", hour=8, minute=0, id="send_payday_reminders")

    scheduler.start()
    logging.info("SYSTEM >>> Scheduler started")
    return scheduler
