"""
crm_assistant/services/sample_knowledge.py

Starter knowledge base offered on the "Knowledge" page so a new workspace
has something to retrieve from.
"""

from typing import Dict, List

SAMPLE_DOCUMENTS: List[Dict[str, str]] = [
    {
        "title": "CRM Best Practices",
        "type": "knowledge",
        "source": "manual",
        "content": (
            "Customer Relationship Management (CRM) best practices include:\n\n"
            "1. Data Quality Management: Ensure all customer data is accurate, complete, "
            "and up-to-date. Regular data cleaning and validation processes are essential.\n\n"
            "2. Lead Scoring: Score and prioritize leads based on their likelihood to convert. "
            "Consider engagement level, company size, and budget.\n\n"
            "3. Sales Pipeline Management: Maintain a clear pipeline with distinct stages. "
            "Track conversion rates between stages to identify bottlenecks.\n\n"
            "4. Customer Segmentation: Group customers by industry, company size, purchasing "
            "behavior, and engagement level to personalize their experience.\n\n"
            "5. Follow-up Automation: Set up automated follow-up sequences for leads and "
            "customers to keep communication consistent.\n\n"
            "6. Performance Analytics: Regularly analyze sales metrics, customer lifetime "
            "value, conversion rates, and team performance."
        ),
    },
    {
        "title": "Common Sales Objections and Responses",
        "type": "knowledge",
        "source": "manual",
        "content": (
            "\"It's too expensive\" - Response: \"I understand budget is a concern. Let's look "
            "at the ROI and value this solution provides. What specific budget constraints are "
            "you working with?\"\n\n"
            "\"We need to think about it\" - Response: \"What specific aspects would you like "
            "to discuss further? Perhaps I can address any concerns now.\"\n\n"
            "\"We're happy with our current solution\" - Response: \"What would it take for a "
            "solution to be significantly better than what you have now?\"\n\n"
            "\"We don't have time to implement this\" - Response: \"Our solution is designed "
            "for quick deployment. What's your ideal timeline?\"\n\n"
            "\"I need to check with my team\" - Response: \"Would it help if I joined that "
            "conversation to answer any technical questions?\""
        ),
    },
    {
        "title": "Customer Onboarding Process",
        "type": "procedure",
        "source": "manual",
        "content": (
            "Week 1, Welcome and Setup: send the welcome email with the onboarding checklist, "
            "schedule a kickoff call with the customer success manager, provide portal access.\n\n"
            "Week 2, Training and Configuration: run product training for key users, configure "
            "settings, set up integrations with existing tools.\n\n"
            "Week 3, Go-Live Support: assist with data migration, provide hands-on support, "
            "monitor adoption.\n\n"
            "Week 4, Review and Optimization: hold the 30-day review, analyze usage patterns, "
            "agree on long-term success metrics."
        ),
    },
    {
        "title": "Product Pricing Tiers",
        "type": "knowledge",
        "source": "manual",
        "content": (
            "Starter Plan ($29/user/month): up to 1,000 contacts, basic lead management, "
            "email integration, standard reporting, email support.\n\n"
            "Professional Plan ($59/user/month): up to 10,000 contacts, automation workflows, "
            "custom fields and dashboards, advanced reporting, priority support, API access.\n\n"
            "Enterprise Plan ($99/user/month): unlimited contacts, advanced security, custom "
            "integrations, dedicated customer success manager, forecasting, 24/7 support.\n\n"
            "All plans include mobile app access, data backup, a 99.9% uptime guarantee and "
            "a 30-day free trial."
        ),
    },
    {
        "title": "Data Security and Privacy Policy",
        "type": "policy",
        "source": "manual",
        "content": (
            "Encryption: data in transit uses TLS 1.3; data at rest uses AES-256; backups are "
            "encrypted.\n\n"
            "Access controls: role-based access, mandatory two-factor authentication for admin "
            "accounts, regular access reviews and audit logs.\n\n"
            "Compliance: GDPR, CCPA, SOC 2 Type II, regular penetration testing.\n\n"
            "Retention: customer data is kept while the account is active, backups for 90 days "
            "after closure, audit logs for 7 years. Customers can request access, correction, "
            "or deletion of their data at any time."
        ),
    },
]
